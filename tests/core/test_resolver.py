"""Tests for pins.core.runtime.resolver module."""

import json
from datetime import datetime

import pytest

from pins.core.constants import StorageKey
from pins.core.directives import directive
from pins.core.models import DirectiveKind, DirectiveResult, Pin
from pins.core.registry import DirectiveRegistry
from pins.core.runtime import Resolver, assemble_context
from pins.core.syntax import DirectiveMatch


def build_resolver(settings, *directives):
    return Resolver(DirectiveRegistry(directives), settings)


class TestResolverBasics:
    """Test suite for identity, idempotence and failure handling."""

    @pytest.mark.asyncio
    async def test_identity_without_markers(self, resolver, context):
        """Test that text without markers is returned unchanged."""
        for text in ("", "plain text", "https://example.com/?q=1", "{single} braces }}"):
            assert await resolver.resolve(text, context) == text

    @pytest.mark.asyncio
    async def test_unknown_directive_left_as_text(self, resolver, context):
        """Test that unregistered markers are not touched."""
        text = "Hello {{notADirective:x}}"
        assert await resolver.resolve(text, context) == text

    @pytest.mark.asyncio
    async def test_idempotent(self, resolver, context):
        """Test that resolving a resolved string again changes nothing."""
        once = await resolver.resolve("User {{user}} on {{hostname}}", context)
        assert await resolver.resolve(once, context) == once

    @pytest.mark.asyncio
    async def test_failing_handler_substitutes_empty_string(self, settings, context):
        """Test that a raising handler is replaced by an empty string."""

        @directive("boom", DirectiveKind.STATIC)
        async def boom(match, ctx):
            """Always fails."""
            raise RuntimeError("boom")

        @directive("name", DirectiveKind.INFORMATIONAL, constant=True)
        async def name(match, ctx):
            """A name."""
            return "Ada"

        resolver = build_resolver(settings, boom, name)
        assert await resolver.resolve("a{{boom:x}}b {{name}}", context) == "ab Ada"

    @pytest.mark.asyncio
    async def test_none_result_is_empty(self, settings, context):
        """Test that a handler returning None substitutes nothing."""

        @directive("quiet", DirectiveKind.STATIC)
        async def quiet(match, ctx):
            """Returns nothing."""
            return None

        resolver = build_resolver(settings, quiet)
        assert await resolver.resolve("[{{quiet}}]", context) == "[]"

    @pytest.mark.asyncio
    async def test_inapplicable_left_as_text(self, settings, context):
        """Test that a directive whose rules reject is left untouched."""

        async def never(text, ctx):
            return False

        @directive("gated", DirectiveKind.STATIC, rules=(never,))
        async def gated(match, ctx):
            """Never runs."""
            return "ran"

        resolver = build_resolver(settings, gated)
        assert await resolver.resolve("{{gated}} {{gated:x}}", context) == "{{gated}} {{gated:x}}"


class TestResolverNesting:
    """Test suite for nested directives."""

    @pytest.mark.asyncio
    async def test_same_directive_innermost_first(self, settings, context):
        """Test that a nested occurrence resolves before its parent."""
        bodies = []

        @directive("upper", DirectiveKind.STATIC)
        async def upper(match, ctx):
            """Upper-cases the body."""
            bodies.append(match.body)
            return match.body.upper()

        resolver = build_resolver(settings, upper)
        result = await resolver.resolve("{{upper:a {{upper:b}}}}", context)

        assert result == "A B"
        assert bodies == ["b", "a B"]

    @pytest.mark.asyncio
    async def test_inner_directive_of_earlier_rank_first(self, settings, context):
        """Test that the outer handler receives its body already resolved."""
        received = []

        @directive("wrap", DirectiveKind.STATIC)
        async def wrap(match, ctx):
            """Wraps the body."""
            received.append(match.body)
            return f"<{match.body}>"

        @directive("name", DirectiveKind.INFORMATIONAL, constant=True)
        async def name(match, ctx):
            """A name."""
            return "Ada"

        resolver = build_resolver(settings, wrap, name)
        assert await resolver.resolve("{{wrap:hi {{name}}}}", context) == "<hi Ada>"
        assert received == ["hi Ada"]

    @pytest.mark.asyncio
    async def test_result_containing_markers_is_resolved(self, settings, context):
        """Test that markers produced by a handler are resolved in a later pass."""

        @directive("template", DirectiveKind.STATIC)
        async def template(match, ctx):
            """Produces another directive."""
            return "Hello {{name}}"

        @directive("name", DirectiveKind.INFORMATIONAL, constant=True)
        async def name(match, ctx):
            """A name."""
            return "Ada"

        resolver = build_resolver(settings, template, name)
        assert await resolver.resolve("{{template}}", context) == "Hello Ada"


class TestResolverTermination:
    """Test suite for bounded termination."""

    @pytest.mark.asyncio
    async def test_self_reproducing_directive_stops_at_cap(self, settings, context):
        """Test that a handler re-emitting its own marker terminates."""
        calls = []

        @directive("loop", DirectiveKind.STATIC)
        async def loop(match, ctx):
            """Re-emits itself."""
            calls.append(1)
            return "{{loop}}"

        capped = settings.model_copy(update={"max_iterations": 5})
        resolver = build_resolver(capped, loop)
        result = await resolver.resolve("{{loop}}", context)

        assert result == "{{loop}}"
        assert len(calls) == 5

    @pytest.mark.asyncio
    async def test_mutually_recursive_directives_stop(self, settings, context):
        """Test that two directives producing each other terminate."""

        @directive("ping", DirectiveKind.STATIC)
        async def ping(match, ctx):
            """Produces pong."""
            return "{{pong}}"

        @directive("pong", DirectiveKind.INTERACTIVE)
        async def pong(match, ctx):
            """Produces ping."""
            return "{{ping}}"

        capped = settings.model_copy(update={"max_iterations": 3})
        resolver = build_resolver(capped, ping, pong)
        result = await resolver.resolve("{{ping}}", context)
        assert result in ("{{ping}}", "{{pong}}")


class TestResolverContext:
    """Test suite for constants and named outputs."""

    @pytest.mark.asyncio
    async def test_constant_evaluated_once_per_text(self, settings, context):
        """Test that identical constant occurrences share one evaluation."""
        calls = []

        @directive("stamp", DirectiveKind.INFORMATIONAL, constant=True)
        async def stamp(match, ctx):
            """A counter."""
            calls.append(1)
            return str(len(calls))

        resolver = build_resolver(settings, stamp)
        assert await resolver.resolve("{{stamp}} {{stamp}}", context) == "1 1"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_live_directive_evaluated_each_time(self, settings, context):
        """Test that non-constant directives run for every occurrence."""
        calls = []

        @directive("tick", DirectiveKind.INFORMATIONAL)
        async def tick(match, ctx):
            """A counter."""
            calls.append(1)
            return str(len(calls))

        resolver = build_resolver(settings, tick)
        assert await resolver.resolve("{{tick}} {{tick}}", context) == "1 2"

    @pytest.mark.asyncio
    async def test_constant_served_from_context(self, settings, services):
        """Test that a context value under the directive's name is reused."""

        @directive("clipboardText", DirectiveKind.INFORMATIONAL, constant=True)
        async def clipboard(match, ctx):
            """Reads the clipboard."""
            raise AssertionError("should not be called")

        resolver = build_resolver(settings, clipboard)
        context = assemble_context(services, extras={"clipboardText": "from extras"})
        assert await resolver.resolve("[{{clipboardText}}]", context) == "[from extras]"

    @pytest.mark.asyncio
    async def test_named_outputs_visible_to_later_directives(self, settings, context):
        """Test that named outputs are merged into the context."""

        @directive("remember", DirectiveKind.STATIC)
        async def remember(match, ctx):
            """Stores a value."""
            return DirectiveResult(result="", named_outputs={"who": match.body})

        @directive("recall", DirectiveKind.INTERACTIVE)
        async def recall(match, ctx):
            """Reads the value."""
            return ctx.get("who", "nobody")

        resolver = build_resolver(settings, remember, recall)
        text, final = await resolver.resolve_with_context("{{remember:Ada}}{{recall}}", context)

        assert text == "Ada"
        assert final.get("who") == "Ada"
        # the caller's context is not mutated
        assert context.get("who") is None

    @pytest.mark.asyncio
    async def test_invoke_single_directive(self, settings, context):
        """Test invoking one directive from a rendered invocation."""

        @directive("echo", DirectiveKind.STATIC)
        async def echo(match, ctx):
            """Echoes the body."""
            return match.body

        resolver = build_resolver(settings, echo)
        assert await resolver.invoke(echo, "{{echo:hi}}", context) == "hi"
        assert await resolver.invoke(echo, "{{echo:hi", context) == ""
        call = DirectiveMatch.from_call("echo", ["a}}b"])
        assert await resolver.invoke(echo, call, context) == "a}}b"


class TestResolverBuiltins:
    """Test suite for resolution with the built-in directive set."""

    @pytest.mark.asyncio
    async def test_date_and_previous_pin_without_history(self, resolver, context):
        """Test that previousPinName is empty before any pin was opened."""
        today = datetime.now().strftime("%d %B %Y")
        result = await resolver.resolve("{{date}} - {{previousPinName}}", context)
        assert result == f"{today} - "

    @pytest.mark.asyncio
    async def test_date_and_previous_pin_with_history(self, resolver, services):
        """Test that previousPinName is the URL-encoded name of the last pin."""
        pin = Pin(name="My Pin", url="https://example.com")
        await services.pins.add([pin])
        await services.storage.set_item(StorageKey.LAST_OPENED_PIN.value, pin.id)

        today = datetime.now().strftime("%d %B %Y")
        result = await resolver.resolve(
            "{{date}} - {{previousPinName}}", assemble_context(services)
        )
        assert result == f"{today} - My%20Pin"

    @pytest.mark.asyncio
    async def test_move_then_pin_json_reflects_new_group(self, resolver, services):
        """Test that pinJSON observes a movePin in the same target."""
        pin = Pin(name="Alpha", url="https://example.com", group="Inbox")
        await services.pins.add([pin])
        context = assemble_context(services, pin=pin)

        result = await resolver.resolve("{{pinJSON}}{{movePin:Alpha:Archive}}", context)

        data = json.loads(result)
        assert data["groups"] == []
        assert data["pins"][0]["group"] == "Archive"
        assert [g.name for g in await services.groups.list()] == ["Archive"]

    @pytest.mark.asyncio
    async def test_extras_serve_environment_values(self, resolver, services, platform):
        """Test that values in the context win over live platform reads."""
        context = assemble_context(services, extras={"currentAppName": "Terminal"})
        assert await resolver.resolve("{{currentAppName}}", context) == "Terminal"
        platform.get_frontmost_application.assert_not_called()

    @pytest.mark.asyncio
    async def test_never_raises_without_collaborators(self, resolver, services):
        """Test that missing collaborators collapse to empty substitutions."""
        bare = services.__class__(
            pins=services.pins,
            groups=services.groups,
            tags=services.tags,
            storage=services.storage,
            settings=services.settings,
        )
        context = assemble_context(bare)
        result = await resolver.resolve("[{{clipboardText}}][{{ai:hi}}][{{alert:x}}]", context)
        assert result == "[][][]"
