"""Pin, Group and Tag models - the items held by the persisted stores."""

import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


def generate_item_id() -> str:
    """Generate a unique item ID."""
    return uuid.uuid4().hex[:12]


class ItemType(str, Enum):
    PIN = "pin"
    GROUP = "group"
    TAG = "tag"


class Visibility(str, Enum):
    """Where a pin or group is visible, if at all."""

    USE_PARENT = "use_parent"
    VISIBLE = "visible"
    MENUBAR_ONLY = "menubar_only"
    VIEW_PINS_ONLY = "view_pins_only"
    HIDDEN = "hidden"
    DISABLED = "disabled"


class PinAction(str, Enum):
    """Actions that can be taken on pins, including on expiration."""

    OPEN = "open"
    COPY = "copy"
    EDIT = "edit"
    DELETE = "delete"
    HIDE = "hide"
    DISABLE = "disable"
    MOVE = "move"


class BaseItem(BaseModel):
    """Fields shared by every stored item."""

    id: str = Field(default_factory=generate_item_id)
    name: str
    date_created: datetime = Field(default_factory=lambda: datetime.now(UTC))


class Pin(BaseItem):
    """A pinned shortcut.

    The ``url`` is the pin's target string: a URL, a path, a terminal command
    or a text fragment. It is run through the directive engine every time the
    pin is used.
    """

    item_type: ItemType = ItemType.PIN
    name: str = "New Pin"
    url: str = ""
    icon: str = "Favicon / File Icon"
    group: str = Field(
        default="None", description="Name of the owning group, or 'None'"
    )
    application: str = "None"
    expire_date: Optional[datetime] = None
    expiration_action: str = Field(
        default=PinAction.DELETE.value,
        description="'delete', 'hide', 'disable' or a custom directive string "
        "starting with 'custom'",
    )
    fragment: bool = Field(
        default=False, description="Treat the target as text to copy"
    )
    exec_in_background: bool = False
    last_opened: Optional[datetime] = None
    times_opened: int = 0
    average_execution_time: int = Field(
        default=0, description="Average execution time in milliseconds"
    )
    tags: List[str] = Field(default_factory=list)
    notes: str = ""
    tooltip: str = ""
    visibility: Visibility = Visibility.VISIBLE
    aliases: List[str] = Field(default_factory=list)

    def matches_reference(self, ref: str) -> bool:
        """Whether ``ref`` names this pin by name, id or alias."""
        return ref == self.name or ref == self.id or ref in self.aliases


class Group(BaseItem):
    """A named group of pins."""

    item_type: ItemType = ItemType.GROUP
    name: str = "New Group"
    icon: str = "Minus"
    parent: Optional[str] = None
    sort_strategy: str = "manual"
    visibility: Visibility = Visibility.USE_PARENT
    tags: List[str] = Field(default_factory=list)

    def matches_reference(self, ref: str) -> bool:
        return ref == self.name or ref == self.id


class Tag(BaseItem):
    """A tag that can be attached to pins and groups."""

    item_type: ItemType = ItemType.TAG
    color: str = "PrimaryText"
