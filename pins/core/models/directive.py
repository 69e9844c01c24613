"""Directive descriptor - the declarative contract for one directive."""

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# (candidate_text, context) -> bool
Rule = Callable[..., Awaitable[bool]]
# (match, context) -> DirectiveResult | str
Handler = Callable[..., Awaitable[Any]]


class DirectiveKind(str, Enum):
    """Classifies resolution order and whether side effects are expected."""

    INFORMATIONAL = "informational"
    STATIC = "static_directive"
    INTERACTIVE = "interactive_directive"
    SCRIPT = "script"


class DirectiveResult(BaseModel):
    """What a handler produced for one occurrence.

    ``result`` replaces the matched span. ``named_outputs`` are merged into
    the context seen by every later directive in the same resolution.
    """

    result: str = ""
    named_outputs: Dict[str, str] = Field(default_factory=dict)


class Directive(BaseModel):
    """A named, pattern-matched unit of the mini-language in a target string.

    The Scanner recognizes ``{{name ...}}`` for the name and every alias.
    Bodies may contain nested, balanced ``{{...}}`` occurrences.

    Example:
        Directive(
            name="date",
            description="The current date.",
            kind=DirectiveKind.INFORMATIONAL,
            constant=True,
            handler=render_date,
        )
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    # Identity
    name: str = Field(..., description="Unique identifier, e.g. 'movePin'")
    aliases: Tuple[str, ...] = Field(
        default=(), description="Other spellings, e.g. ('openPin', 'runPin')"
    )
    description: str = Field(default="", description="Shown in directive guides")
    example: str = Field(default="", description="e.g. '{{movePin:pinName:groupName}}'")

    # Behaviour
    kind: DirectiveKind
    constant: bool = Field(
        default=False,
        description="Repeated evaluation within one pass yields the same result",
    )
    eager: bool = Field(
        default=False,
        description="Resolve before every other directive so the body is "
        "captured verbatim (used by delay)",
    )
    rules: Tuple[Rule, ...] = Field(
        default=(),
        description="Applicable if empty or if any rule returns True",
    )
    handler: Handler

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Names must be usable as a directive spelling."""
        if not v or not (v[0].isalpha() or v[0] == "_") or not v.replace("_", "a").isalnum():
            raise ValueError(f"Directive name must be an identifier, got '{v}'")
        return v

    @property
    def spellings(self) -> Tuple[str, ...]:
        """The name followed by every alias."""
        return (self.name, *self.aliases)
