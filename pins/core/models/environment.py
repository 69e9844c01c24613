"""Ambient environment snapshot supplied by the platform layer."""

from typing import List, Optional

from pydantic import BaseModel, Field


class AppRef(BaseModel):
    name: str = ""
    path: str = ""


class FileRef(BaseModel):
    name: str = ""
    path: str = ""


class TabRef(BaseModel):
    name: str = ""
    url: str = ""


class TrackRef(BaseModel):
    name: str = ""
    artist: str = ""
    album: str = ""


class EnvironmentSnapshot(BaseModel):
    """Ambient data captured when a pin is used.

    Every field is optional. The context assembler flattens the snapshot to
    strings and drops anything empty, so directives that depend on a value
    fall back to reading it from the platform or to "not applicable".
    """

    current_application: Optional[AppRef] = None
    current_directory: Optional[FileRef] = None
    selected_files: List[FileRef] = Field(default_factory=list)
    current_tab: Optional[TabRef] = None
    current_track: Optional[TrackRef] = None
    selected_text: Optional[str] = None
    clipboard_text: Optional[str] = None
