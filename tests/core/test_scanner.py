"""Tests for pins.core.syntax.scanner module."""

from pins.core.syntax import (
    DirectiveMatch,
    contains_marker,
    find_directive,
    render_invocation,
    split_arguments,
)


class TestFindDirective:
    """Test suite for find_directive."""

    def test_bare_directive(self):
        """Test matching a directive with no params or body."""
        match = find_directive("Today is {{date}}.", ["date"])
        assert match is not None
        assert match.text == "{{date}}"
        assert match.start == 9
        assert match.end == 17
        assert match.body is None
        assert match.params == {}

    def test_body_after_colon(self):
        """Test that everything after the first colon is the body."""
        match = find_directive("{{shell:echo a:b}}", ["shell"])
        assert match.body == "echo a:b"

    def test_params_and_flags(self):
        """Test quoted, single-quoted and bare params plus flags."""
        match = find_directive(
            """{{dialog title="Hello there" voice='Alex' input=true 5m:Body}}""",
            ["dialog"],
        )
        assert match.params == {"title": "Hello there", "voice": "Alex", "input": "true"}
        assert match.flags == ("5m",)
        assert match.body == "Body"

    def test_alias_spelling(self):
        """Test matching any of the given spellings."""
        match = find_directive("{{openPin:Docs}}", ["launchPin", "openPin", "runPin"])
        assert match.name == "openPin"
        assert match.body == "Docs"

    def test_prefix_of_longer_name_does_not_match(self):
        """Test that 'pin' does not match inside '{{pinNames}}'."""
        assert find_directive("{{pinNames}}", ["pin"]) is None

    def test_longest_spelling_wins(self):
        """Test that the longest spelling followed by a boundary is used."""
        match = find_directive("{{pinNames amount=2}}", ["pin", "pinNames"])
        assert match.name == "pinNames"
        assert match.params == {"amount": "2"}

    def test_unbalanced_is_not_a_match(self):
        """Test that an unclosed directive is left alone."""
        assert find_directive("{{date", ["date"]) is None
        assert find_directive("{{shell:echo {{date}}", ["shell"]) is None

    def test_nested_body_is_balanced(self):
        """Test that nested markers are part of the outer body."""
        match = find_directive("{{ai:Summarize {{clipboardText}} now}} after", ["ai"])
        assert match.body == "Summarize {{clipboardText}} now"
        assert match.text == "{{ai:Summarize {{clipboardText}} now}}"

    def test_innermost_same_directive_first(self):
        """Test that a nested occurrence of the same directive is found first."""
        text = "{{shell:echo {{shell:whoami}}}}"
        match = find_directive(text, ["shell"])
        assert match.body == "whoami"

    def test_outermost_when_requested(self):
        """Test that innermost=False returns the enclosing occurrence."""
        text = "{{delay 5:{{delay 10:{{toast:Hi}}}}}}"
        match = find_directive(text, ["delay"], innermost=False)
        assert match.start == 0
        assert match.body == "{{delay 10:{{toast:Hi}}}}"

    def test_start_offset(self):
        """Test scanning from an offset skips earlier occurrences."""
        text = "{{date}} and {{date}}"
        match = find_directive(text, ["date"], start=1)
        assert match.start == 13

    def test_malformed_header_is_not_a_match(self):
        """Test that a header with stray quotes is left as text."""
        assert find_directive('{{date "oops}}', ["date"]) is None

    def test_other_directive_ignored(self):
        """Test that unknown names are skipped."""
        assert find_directive("{{unknown}} {{date}}", ["date"]).start == 12


class TestSplitArguments:
    """Test suite for split_arguments."""

    def test_last_argument_absorbs_remainder(self):
        """Test that extra colons stay in the last argument."""
        assert split_arguments("a:b:c:d", 2) == ["a", "b:c:d"]

    def test_colons_in_nested_markers_do_not_split(self):
        """Test that colons inside nested directives are not separators."""
        assert split_arguments("{{get:x}}:value", 2) == ["{{get:x}}", "value"]

    def test_single_argument(self):
        """Test that count=1 returns the whole body."""
        assert split_arguments("a:b", 1) == ["a:b"]

    def test_fewer_parts_than_count(self):
        """Test that a body with fewer separators returns what it has."""
        assert split_arguments("only", 3) == ["only"]

    def test_match_arguments(self):
        """Test DirectiveMatch.arguments and argument."""
        match = find_directive("{{createPin:Docs:https://docs.python.org}}", ["createPin"])
        assert match.arguments(3) == ["Docs", "https", "//docs.python.org"]
        assert match.argument(0, 2) == "Docs"
        assert match.argument(1, 2) == "https://docs.python.org"
        assert match.argument(2, 2, default="none") == "none"


class TestRenderInvocation:
    """Test suite for render_invocation."""

    def test_no_arguments(self):
        """Test rendering a bare directive."""
        assert render_invocation("date") == "{{date}}"

    def test_positional_arguments(self):
        """Test that positional arguments become the colon-joined body."""
        assert render_invocation("movePin", ["Alpha", "Archive"]) == "{{movePin:Alpha:Archive}}"

    def test_keyword_arguments(self):
        """Test that keyword arguments become header params."""
        rendered = render_invocation("ai", ["Hello"], {"model": "gpt-4o-mini"})
        assert rendered == '{{ai model="gpt-4o-mini":Hello}}'

    def test_keyword_value_with_double_quote(self):
        """Test that values containing double quotes use single quotes."""
        rendered = render_invocation("alert", ["Body"], {"title": 'Say "hi"'})
        match = find_directive(rendered, ["alert"])
        assert match.params["title"] == 'Say "hi"'


class TestDirectiveMatchFromCall:
    """Test suite for DirectiveMatch.from_call."""

    def test_arguments_taken_as_given(self):
        """Test that call arguments are not re-split on colons."""
        match = DirectiveMatch.from_call("createPin", ["Docs", "https://docs.python.org"])
        assert match.arguments(3) == ["Docs", "https://docs.python.org"]
        assert match.argument(1, 3) == "https://docs.python.org"
        assert match.body == "Docs:https://docs.python.org"

    def test_extra_arguments_fold_into_last(self):
        """Test that surplus arguments join the last declared one."""
        match = DirectiveMatch.from_call("set", ["name", "a", "b"])
        assert match.arguments(2) == ["name", "a:b"]
        assert match.arguments(1) == ["name:a:b"]

    def test_markers_in_arguments(self):
        """Test that closing markers in arguments stay intact."""
        match = DirectiveMatch.from_call("copy", ['{"a": {"b": 1}}'], {"silent": True})
        assert match.body == '{"a": {"b": 1}}'
        assert match.params == {"silent": "True"}

    def test_no_arguments(self):
        """Test a call without arguments."""
        match = DirectiveMatch.from_call("date")
        assert match.body is None
        assert match.arguments(2) == []
        assert match.text == "{{date}}"


def test_contains_marker():
    """Test marker detection."""
    assert contains_marker("a {{b")
    assert not contains_marker("plain text")
