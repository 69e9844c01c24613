"""ScriptSandbox - time-limited execution of user scripts.

Scripts are Python source with top-level ``await``. Each run happens in a
fresh child interpreter (``worker.py``) whose namespace holds a curated
builtins subset, a copy of the resolution's named outputs, and one async
callable per non-script directive. Directive calls are sent back to this
process and run against the live resolver. Scripts get no module access:
imports are rejected, as is any name or attribute that could reach
interpreter internals.

The deadline is enforced from here: when it passes the child is killed,
which also stops a single long builtin call such as ``sum(range(10**10))``.

Example script body:
    names = (await pinNames()).split(", ")
    f"{len(names)} pins, today is {await date()}"
"""

import ast
import asyncio
import builtins
import json
import keyword
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Mapping, Optional

from pins.core.exceptions import (
    ScriptError,
    ScriptRuntimeError,
    ScriptSecurityError,
    ScriptTimeoutError,
)
from pins.core.models import Directive, DirectiveKind
from pins.core.sandbox.worker import (
    HELPER_NAMES,
    RESULT_NAME,
    SAFE_BUILTIN_NAMES,
    SCRIPT_FILENAME,
)
from pins.core.syntax import DirectiveMatch

if TYPE_CHECKING:
    from pins.core.runtime.context import ResolutionContext
    from pins.core.runtime.resolver import Resolver

logger = logging.getLogger(__name__)

WORKER_PATH = Path(__file__).with_name("worker.py")
# Interpreter start-up is not charged to the script's own time limit
STARTUP_TIMEOUT_SECONDS = 10.0
# Directive results such as {{pins}} can be long single lines
STREAM_LIMIT = 16 * 1024 * 1024

SAFE_BUILTINS: Dict[str, Any] = {name: getattr(builtins, name) for name in SAFE_BUILTIN_NAMES}

# Attributes that reach frames, code objects or globals without a leading underscore
FORBIDDEN_ATTRIBUTES = frozenset({
    "ag_code", "ag_frame", "cr_code", "cr_frame", "f_back", "f_builtins",
    "f_code", "f_globals", "f_locals", "format", "format_map", "gi_code",
    "gi_frame", "gi_yieldfrom", "cr_await", "tb_frame", "tb_next",
    "mro", "cell_contents",
})

ScriptCallable = Callable[..., Awaitable[str]]


class _ScriptValidator(ast.NodeVisitor):
    def _reject(self, node: ast.AST, what: str) -> None:
        raise ScriptSecurityError(f"Line {getattr(node, 'lineno', '?')}: {what} is not allowed")

    def visit_Import(self, node: ast.Import) -> None:
        self._reject(node, "import")

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        self._reject(node, "import")

    def visit_Global(self, node: ast.Global) -> None:
        self._reject(node, "global")

    def visit_Nonlocal(self, node: ast.Nonlocal) -> None:
        self._reject(node, "nonlocal")

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        if node.type is None:
            self._reject(node, "bare except")
        self.generic_visit(node)

    def visit_Name(self, node: ast.Name) -> None:
        if node.id.startswith("_"):
            self._reject(node, f"name '{node.id}'")
        self.generic_visit(node)

    def visit_Attribute(self, node: ast.Attribute) -> None:
        if node.attr.startswith("_") or node.attr in FORBIDDEN_ATTRIBUTES:
            self._reject(node, f"attribute '{node.attr}'")
        self.generic_visit(node)

    def visit_arg(self, node: ast.arg) -> None:
        if node.arg.startswith("_"):
            self._reject(node, f"argument '{node.arg}'")
        self.generic_visit(node)

    def _check_definition(self, node: Any) -> None:
        if node.name.startswith("_"):
            self._reject(node, f"definition '{node.name}'")
        self.generic_visit(node)

    visit_FunctionDef = _check_definition
    visit_AsyncFunctionDef = _check_definition
    visit_ClassDef = _check_definition


def parse_script(source: str) -> ast.Module:
    """Parse and validate a script, capturing its final expression.

    The returned tree compiles as-is with ``ast.PyCF_ALLOW_TOP_LEVEL_AWAIT``.

    Raises:
        ScriptSecurityError: If the script uses forbidden syntax
        ScriptError: If the script does not parse
    """
    try:
        tree = ast.parse(source, filename=SCRIPT_FILENAME, mode="exec")
    except SyntaxError as e:
        raise ScriptError(f"Syntax error in script: {e}") from e
    _ScriptValidator().visit(tree)

    if tree.body and isinstance(tree.body[-1], ast.Expr):
        last = tree.body[-1]
        target = ast.copy_location(ast.Name(id=RESULT_NAME, ctx=ast.Store()), last)
        tree.body[-1] = ast.copy_location(
            ast.Assign(targets=[target], value=last.value), last
        )
    return tree


class ScriptSandbox:
    """Runs one script body with a fixed set of directive callables.

    The callable mapping is built once from the registry and passed in;
    scripts cannot look anything else up.

    Args:
        callables: Name to async callable, one per exposed directive spelling
        outputs: Named outputs visible to the script as ``outputs``
        timeout: Wall-clock limit in seconds
    """

    def __init__(
        self,
        callables: Mapping[str, ScriptCallable],
        outputs: Optional[Mapping[str, str]] = None,
        timeout: float = 1.0,
    ) -> None:
        self.callables = dict(callables)
        self.outputs = dict(outputs or {})
        self.timeout = timeout

    @classmethod
    def for_context(
        cls,
        resolver: "Resolver",
        context: "ResolutionContext",
        timeout: Optional[float] = None,
    ) -> "ScriptSandbox":
        """Build a sandbox exposing every non-script directive in the resolver's registry."""
        callables: Dict[str, ScriptCallable] = {}
        for directive in resolver.registry:
            if directive.kind == DirectiveKind.SCRIPT:
                continue
            bound = _bind_directive(directive, resolver, context)
            for spelling in directive.spellings:
                if _is_exposable(spelling):
                    callables.setdefault(spelling, bound)
        return cls(
            callables,
            outputs=context.values,
            timeout=timeout if timeout is not None else context.settings.script_timeout_seconds,
        )

    async def run(self, source: str) -> str:
        """Execute ``source`` and return its final expression as a string.

        Raises:
            ScriptSecurityError: Forbidden syntax, before anything runs
            ScriptTimeoutError: The script ran past its time limit
            ScriptRuntimeError: The script raised; ``error_type`` names the exception
            ScriptError: The script does not parse or the worker failed
        """
        program = ast.unparse(parse_script(source))
        process = await asyncio.create_subprocess_exec(
            sys.executable,
            "-I",
            str(WORKER_PATH),
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
            limit=STREAM_LIMIT,
        )
        try:
            try:
                await asyncio.wait_for(_receive(process), timeout=STARTUP_TIMEOUT_SECONDS)
            except asyncio.TimeoutError as e:
                raise ScriptError("Script worker did not start") from e

            await _send(process, {
                "source": program,
                "outputs": self.outputs,
                "callables": sorted(self.callables),
            })
            try:
                return await asyncio.wait_for(self._serve(process), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                raise ScriptTimeoutError("Script exceeded its time limit") from e
        finally:
            if process.returncode is None:
                process.kill()
            await process.wait()

    async def _serve(self, process: asyncio.subprocess.Process) -> str:
        """Answer directive calls until the worker reports its result."""
        while True:
            message = await _receive(process)
            if "call" in message:
                await _send(process, await self._dispatch(message))
            elif "error" in message:
                raise ScriptRuntimeError(message["error"], message.get("message", ""))
            else:
                return message["result"]

    async def _dispatch(self, message: Dict[str, Any]) -> Dict[str, str]:
        name = message["call"]
        call = self.callables.get(name)
        if call is None:
            return {"failed": f"'{name}' is not available to scripts"}
        try:
            result = await call(*message.get("args", []), **message.get("kwargs", {}))
        except Exception as e:
            logger.warning(f"Script call to '{name}' failed: {e}")
            return {"failed": str(e)}
        return {"result": "" if result is None else str(result)}


async def _send(process: asyncio.subprocess.Process, message: Dict[str, Any]) -> None:
    assert process.stdin is not None
    process.stdin.write((json.dumps(message) + "\n").encode())
    await process.stdin.drain()


async def _receive(process: asyncio.subprocess.Process) -> Dict[str, Any]:
    assert process.stdout is not None
    line = await process.stdout.readline()
    if not line:
        raise ScriptError("Script worker exited unexpectedly")
    return json.loads(line)


def _is_exposable(spelling: str) -> bool:
    # builtins such as set keep their meaning; the directive stays reachable by alias
    return (
        spelling.isidentifier()
        and not keyword.iskeyword(spelling)
        and not spelling.startswith("_")
        and spelling not in SAFE_BUILTINS
        and spelling not in HELPER_NAMES
    )


def _bind_directive(
    directive: Directive, resolver: "Resolver", context: "ResolutionContext"
) -> ScriptCallable:
    async def call(*args: Any, **kwargs: Any) -> str:
        match = DirectiveMatch.from_call(directive.name, args, kwargs)
        logger.debug(f"Script called {match.text!r}")
        return await resolver.invoke(directive, match, context)

    call.__name__ = directive.name
    call.__doc__ = directive.description
    return call
