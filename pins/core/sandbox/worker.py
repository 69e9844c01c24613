"""Child process that executes one sandboxed script.

Started by path with ``python -I`` so nothing beyond the standard library is
importable. The parent talks to it over stdin/stdout, one JSON object per
line:

    worker -> parent  {"ready": true}
    parent -> worker  {"source": ..., "outputs": {...}, "callables": [...]}
    worker -> parent  {"call": name, "args": [...], "kwargs": {...}}
    parent -> worker  {"result": "..."} or {"failed": "..."}
    worker -> parent  {"result": "..."} or {"error": type, "message": ...}

The parent owns the deadline and kills this process when it passes.
"""

import ast
import asyncio
import builtins
import inspect
import json
import sys
from types import FunctionType
from typing import Any, Dict, Iterable, Mapping, TextIO

SCRIPT_FILENAME = "<pins-script>"
RESULT_NAME = "_result"

SAFE_BUILTIN_NAMES = (
    "abs", "all", "any", "bool", "chr", "dict", "divmod", "enumerate",
    "filter", "float", "format", "frozenset", "hash", "int", "isinstance",
    "len", "list", "map", "max", "min", "next", "ord", "pow", "range",
    "repr", "reversed", "round", "set", "slice", "sorted", "str", "sum",
    "tuple", "zip",
    "ArithmeticError", "Exception", "IndexError", "KeyError",
    "LookupError", "RuntimeError", "TypeError", "ValueError",
    "ZeroDivisionError",
)
HELPER_NAMES = ("outputs", "json_loads", "json_dumps")


class Channel:
    """Line-delimited JSON over a pair of text streams."""

    def __init__(self, reader: TextIO, writer: TextIO) -> None:
        self.reader = reader
        self.writer = writer

    def send(self, message: Dict[str, Any]) -> None:
        self.writer.write(json.dumps(message) + "\n")
        self.writer.flush()

    def receive(self) -> Dict[str, Any]:
        line = self.reader.readline()
        if not line:
            raise EOFError("Parent closed the channel")
        return json.loads(line)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def directive_proxy(name: str, channel: Channel) -> Any:
    """An async callable that asks the parent to run directive ``name``."""

    async def call(*args: Any, **kwargs: Any) -> str:
        channel.send({
            "call": name,
            "args": [_text(a) for a in args],
            "kwargs": {key: _text(value) for key, value in kwargs.items()},
        })
        reply = channel.receive()
        if "failed" in reply:
            raise RuntimeError(reply["failed"])
        return reply["result"]

    call.__name__ = name
    return call


def build_namespace(
    outputs: Mapping[str, str], callables: Iterable[str], channel: Channel
) -> Dict[str, Any]:
    ns: Dict[str, Any] = {
        "__builtins__": {name: getattr(builtins, name) for name in SAFE_BUILTIN_NAMES},
        "__name__": "__pins_script__",
        "outputs": dict(outputs),
        "json_loads": json.loads,
        "json_dumps": json.dumps,
    }
    for name in callables:
        ns[name] = directive_proxy(name, channel)
    return ns


async def execute(source: str, ns: Dict[str, Any]) -> Any:
    """Run already-validated source and return the value bound to the result name."""
    code = compile(source, SCRIPT_FILENAME, "exec", flags=ast.PyCF_ALLOW_TOP_LEVEL_AWAIT)
    if code.co_flags & inspect.CO_COROUTINE:
        await FunctionType(code, ns)()
    else:
        exec(code, ns)
    value = ns.get(RESULT_NAME)
    if inspect.isawaitable(value):
        value = await value
    return value


def main() -> int:
    channel = Channel(sys.stdin, sys.stdout)
    # stdout carries the protocol
    sys.stdout = sys.stderr
    channel.send({"ready": True})

    request = channel.receive()
    ns = build_namespace(request.get("outputs", {}), request.get("callables", []), channel)
    try:
        result = _text(asyncio.run(execute(request["source"], ns)))
    except Exception as e:
        channel.send({"error": type(e).__name__, "message": str(e)})
        return 1
    channel.send({"result": result})
    return 0


if __name__ == "__main__":
    sys.exit(main())
