"""Directive syntax: scanning and rendering of ``{{...}}`` occurrences."""

from pins.core.syntax.scanner import (
    CLOSE,
    OPEN,
    DirectiveMatch,
    contains_marker,
    find_directive,
    render_invocation,
    split_arguments,
)

__all__ = [
    "CLOSE",
    "OPEN",
    "DirectiveMatch",
    "contains_marker",
    "find_directive",
    "render_invocation",
    "split_arguments",
]
