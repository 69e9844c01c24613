"""Stack-based scanner for ``{{name params:body}}`` directive occurrences.

One depth-counting pass is shared by every directive. The scanner only
decides where an occurrence starts and ends and what its header says; the
resolver decides what to do with it.

Syntax:
    {{name}}
    {{name:arg}}
    {{name:arg1:arg2}}
    {{name key="value" key2=value2 flag:arg}}

The body after the first top-level ``:`` may itself contain balanced
``{{...}}`` occurrences. The first unbalanced ``}}`` closes the directive,
so a literal ``}}`` cannot appear inside a body.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

OPEN = "{{"
CLOSE = "}}"

_PARAM_RE = re.compile(
    r"""([A-Za-z_][\w-]*)=(?:"([^"]*)"|'([^']*)'|([^\s:"']*))"""
)
_WORD_RE = re.compile(r"""[^\s:="']+""")


@dataclass(frozen=True)
class DirectiveMatch:
    """One occurrence of a directive in a target string."""

    text: str
    start: int
    end: int
    name: str
    params: Dict[str, str] = field(default_factory=dict)
    flags: Tuple[str, ...] = ()
    body: Optional[str] = None
    # Set for calls made from scripts; arguments are taken as given, not split
    call_args: Optional[Tuple[str, ...]] = None

    @classmethod
    def from_call(
        cls,
        name: str,
        args: Sequence[object] = (),
        kwargs: Optional[Mapping[str, object]] = None,
    ) -> "DirectiveMatch":
        """Build a match for a direct call, without rendering and re-scanning.

        Argument text may contain ``:`` or ``}}``; it reaches the handler intact.
        """
        values = tuple(str(a) for a in args)
        params = {key: str(value) for key, value in (kwargs or {}).items()}
        text = render_invocation(name, values, params)
        return cls(
            text=text,
            start=0,
            end=len(text),
            name=name,
            params=params,
            body=":".join(values) if values else None,
            call_args=values,
        )

    def arguments(self, count: int) -> List[str]:
        """Split the body into at most ``count`` top-level arguments.

        The last argument absorbs the remainder, colons included. Returns an
        empty list when the occurrence has no body.
        """
        if self.body is None:
            return []
        if self.call_args is not None:
            if count <= 1 or len(self.call_args) <= count:
                return [self.body] if count <= 1 else list(self.call_args)
            head = list(self.call_args[:count - 1])
            return head + [":".join(self.call_args[count - 1:])]
        return split_arguments(self.body, count)

    def argument(self, index: int, count: int, default: str = "") -> str:
        args = self.arguments(count)
        return args[index] if index < len(args) else default

    def param(self, key: str, default: str = "") -> str:
        return self.params.get(key, default)


def _find_close(text: str, pos: int, end: int) -> int:
    """Return the index of the ``}}`` that balances an already-open marker."""
    depth = 1
    i = pos
    while i < end - 1:
        if text.startswith(OPEN, i):
            depth += 1
            i += 2
        elif text.startswith(CLOSE, i):
            depth -= 1
            if depth == 0:
                return i
            i += 2
        else:
            i += 1
    return -1


def _match_name(text: str, pos: int, spellings: Sequence[str]) -> Optional[str]:
    """Longest spelling at ``pos`` that is followed by a header boundary."""
    for spelling in sorted(spellings, key=len, reverse=True):
        if not text.startswith(spelling, pos):
            continue
        after = pos + len(spelling)
        if after >= len(text):
            continue
        nxt = text[after]
        if nxt.isspace() or nxt == ":" or text.startswith(CLOSE, after):
            return spelling
    return None


def _parse_header(
    header: str,
) -> Optional[Tuple[Dict[str, str], Tuple[str, ...], Optional[str]]]:
    """Parse ``params... [:body]`` following the directive name.

    Returns None when the header holds something that is neither a
    ``key=value`` pair nor a bare word.
    """
    params: Dict[str, str] = {}
    flags: List[str] = []
    i = 0
    while i < len(header):
        c = header[i]
        if c.isspace():
            i += 1
            continue
        if c == ":":
            return params, tuple(flags), header[i + 1:]
        m = _PARAM_RE.match(header, i)
        if m:
            value = next((g for g in m.groups()[1:] if g is not None), "")
            params[m.group(1)] = value
            i = m.end()
            continue
        m = _WORD_RE.match(header, i)
        if m:
            flags.append(m.group(0))
            i = m.end()
            continue
        return None
    return params, tuple(flags), None


def _match_at(
    text: str, start: int, end: int, spellings: Sequence[str]
) -> Optional[DirectiveMatch]:
    name = _match_name(text, start + len(OPEN), spellings)
    if name is None:
        return None
    close = _find_close(text, start + len(OPEN), end)
    if close == -1:
        logger.debug(f"Unbalanced '{name}' occurrence at {start}, leaving as text")
        return None
    parsed = _parse_header(text[start + len(OPEN) + len(name):close])
    if parsed is None:
        logger.debug(f"Malformed header for '{name}' at {start}, leaving as text")
        return None
    params, flags, body = parsed
    return DirectiveMatch(
        text=text[start:close + len(CLOSE)],
        start=start,
        end=close + len(CLOSE),
        name=name,
        params=params,
        flags=flags,
        body=body,
    )


def _scan(
    text: str, spellings: Sequence[str], pos: int, end: int, innermost: bool
) -> Optional[DirectiveMatch]:
    while True:
        idx = text.find(OPEN, pos, end)
        if idx == -1:
            return None
        match = _match_at(text, idx, end, spellings)
        if match is not None:
            if innermost:
                nested = _scan(
                    text, spellings, idx + len(OPEN), match.end - len(CLOSE), True
                )
                if nested is not None:
                    return nested
            return match
        pos = idx + 1


def find_directive(
    text: str,
    spellings: Iterable[str],
    start: int = 0,
    innermost: bool = True,
) -> Optional[DirectiveMatch]:
    """Find the first occurrence of any spelling at or after ``start``.

    Args:
        text: String to scan
        spellings: Names that identify the directive (name and aliases)
        start: Index to begin scanning from
        innermost: When the leftmost occurrence contains a nested occurrence
            of the same directive, return the nested one so the inner
            directive is resolved before the outer one receives its body

    Returns:
        The match, or None if there is no balanced occurrence
    """
    return _scan(text, tuple(spellings), start, len(text), innermost)


def contains_marker(text: str) -> bool:
    return OPEN in text


def split_arguments(body: str, count: int) -> List[str]:
    """Split ``body`` on ``:`` outside nested markers into at most ``count`` parts."""
    if count <= 1:
        return [body]
    parts: List[str] = []
    depth = 0
    last = 0
    i = 0
    while i < len(body):
        if body.startswith(OPEN, i):
            depth += 1
            i += 2
            continue
        if body.startswith(CLOSE, i) and depth > 0:
            depth -= 1
            i += 2
            continue
        if body[i] == ":" and depth == 0:
            parts.append(body[last:i])
            last = i + 1
            if len(parts) == count - 1:
                break
        i += 1
    parts.append(body[last:])
    return parts


def _render_value(value: str) -> str:
    if '"' not in value:
        return f'"{value}"'
    return f"'{value}'"


def render_invocation(
    name: str,
    args: Sequence[object] = (),
    kwargs: Optional[Mapping[str, object]] = None,
) -> str:
    """Render a call back into directive syntax.

    ``render_invocation("movePin", ["Alpha", "Archive"])`` gives
    ``{{movePin:Alpha:Archive}}``; keyword arguments become header params.
    """
    header = name
    for key, value in (kwargs or {}).items():
        header += f" {key}={_render_value(str(value))}"
    if args:
        return f"{OPEN}{header}:{':'.join(str(a) for a in args)}{CLOSE}"
    return f"{OPEN}{header}{CLOSE}"
