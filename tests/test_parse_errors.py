"""Test markup errors: unknown names, strict mode, arguments, nesting limits."""

import pytest

from tagtext.component import Component, Style
from tagtext.errors import (
    InvalidTagArgumentError,
    MarkupError,
    MaxNestingExceededError,
    MismatchedCloseTagError,
    UnclosedTagError,
    UnknownPlaceholderError,
)
from tagtext.facade import TagText
from tagtext.parser import NESTED_PARSE_LIMIT
from tagtext.placeholders import Literal
from tagtext.render import render_plain

from .conftest import root


class TestUnknownNames:
    def test_unknown_tag_raises(self, tagtext):
        with pytest.raises(UnknownPlaceholderError) as exc_info:
            tagtext.parse("Hello <name>!")
        assert exc_info.value.name == "name"
        assert exc_info.value.offset == 6

    def test_unknown_raises_in_strict_too(self, strict):
        with pytest.raises(UnknownPlaceholderError):
            strict.parse("<name>")

    def test_unresolved_as_text(self):
        tt = TagText.builder().unresolved_as_text().build()
        tree = tt.parse("Hello <name>!")
        assert tree == root(Component("Hello <name>!"))

    def test_unresolved_close_as_text(self):
        tt = TagText.builder().unresolved_as_text().strict().build()
        tree = tt.parse("a</name>b")
        assert render_plain(tree) == "a</name>b"

    def test_unknown_in_placeholder_text(self, tagtext):
        with pytest.raises(UnknownPlaceholderError) as exc_info:
            tagtext.parse("<greet>", {"greet": "hi <who>"})
        assert exc_info.value.source == "<greet>"
        assert exc_info.value.offset == 0
        assert "(at 1:4 of placeholder '<greet>')" in exc_info.value.message


class TestErrorLocation:
    def test_placeholder_error_points_at_substituting_tag(self, tagtext):
        source = "0123456789 <p>"
        with pytest.raises(UnknownPlaceholderError) as exc_info:
            tagtext.parse(source, {"p": "ab<nope>"})
        error = exc_info.value
        assert error.offset == 11
        assert error.source == source
        assert "1 | 0123456789 <p>" in error.format()
        assert "at 1:3 of placeholder '<p>'" in error.message

    def test_nested_placeholders_report_outermost_tag(self, tagtext):
        with pytest.raises(UnknownPlaceholderError) as exc_info:
            tagtext.parse("x <outer>", {"outer": "<inner>", "inner": "<nope>"})
        assert exc_info.value.offset == 2
        assert "of placeholder '<inner>'" in exc_info.value.message

    def test_unclosed_inside_placeholder(self, strict):
        with pytest.raises(UnclosedTagError) as exc_info:
            strict.parse("ok <p>", {"p": "<bold>x"})
        assert exc_info.value.offset == 3
        assert exc_info.value.source == "ok <p>"

    def test_hover_argument_error_points_at_hover_tag(self, tagtext):
        with pytest.raises(UnknownPlaceholderError) as exc_info:
            tagtext.parse("see <hover:show_text:'<nope>'>x</hover>")
        assert exc_info.value.offset == 4
        assert "of '<hover>' argument" in exc_info.value.message

    def test_byte_offset_counts_utf8(self, tagtext):
        with pytest.raises(UnknownPlaceholderError) as exc_info:
            tagtext.parse("héllo <nope>")
        assert exc_info.value.offset == 6
        assert exc_info.value.byte_offset == 7


class TestStrictMode:
    def test_unclosed_tag(self, strict):
        with pytest.raises(UnclosedTagError) as exc_info:
            strict.parse("say <bold>hi")
        assert exc_info.value.name == "bold"
        assert exc_info.value.offset == 4

    def test_outermost_unclosed_reported(self, strict):
        with pytest.raises(UnclosedTagError) as exc_info:
            strict.parse("<bold><italic>x")
        assert exc_info.value.name == "bold"
        assert exc_info.value.offset == 0

    def test_mismatched_close(self, strict):
        with pytest.raises(MismatchedCloseTagError) as exc_info:
            strict.parse("<bold>a</italic>")
        assert exc_info.value.name == "italic"
        assert exc_info.value.expected == "bold"
        assert exc_info.value.offset == 7

    def test_stray_close(self, strict):
        with pytest.raises(MismatchedCloseTagError) as exc_info:
            strict.parse("a</bold>")
        assert exc_info.value.expected is None

    def test_well_formed_passes(self, strict):
        tree = strict.parse("<bold>a<i>b</i></bold>")
        assert render_plain(tree) == "ab"

    def test_inactive_tags_ignored_in_strict(self):
        tt = TagText.builder().strict().remove_default_transformations().build()
        tree = tt.parse("<bold>x")
        assert render_plain(tree) == "<bold>x"


class TestInvalidArguments:
    def test_bad_color(self, tagtext):
        with pytest.raises(InvalidTagArgumentError) as exc_info:
            tagtext.parse("<color:nope>x</color>")
        assert exc_info.value.tag_name == "color"
        assert "nope" in exc_info.value.reason

    def test_click_needs_value(self, tagtext):
        with pytest.raises(InvalidTagArgumentError):
            tagtext.parse("<click:open_url>x</click>")

    def test_unknown_click_action(self, tagtext):
        with pytest.raises(InvalidTagArgumentError):
            tagtext.parse("<click:explode:now>x</click>")

    def test_decoration_bad_flag(self, tagtext):
        with pytest.raises(InvalidTagArgumentError):
            tagtext.parse("<bold:maybe>x</bold>")

    def test_insert_requires_argument(self, tagtext):
        with pytest.raises(InvalidTagArgumentError):
            tagtext.parse("<insert>x</insert>")

    def test_gradient_single_color(self, tagtext):
        with pytest.raises(InvalidTagArgumentError):
            tagtext.parse("<gradient:red>x</gradient>")

    def test_newline_takes_no_args(self, tagtext):
        with pytest.raises(InvalidTagArgumentError):
            tagtext.parse("<br:1>")


class TestNesting:
    def test_deep_nesting_fails_with_default_limit(self, tagtext):
        depth = 10_000
        source = "<bold>" * depth + "x" + "</bold>" * depth
        with pytest.raises(MaxNestingExceededError) as exc_info:
            tagtext.parse(source)
        assert exc_info.value.limit == 512

    def test_deep_nesting_succeeds_with_raised_limit(self):
        depth = 10_000
        tt = TagText.builder().max_depth(depth + 1).build()
        tree = tt.parse("<bold>" * depth + "x" + "</bold>" * depth)
        # Walk iteratively; structural equality would recurse too deep
        node = tree
        levels = 0
        while node.children and not node.children[0].is_plain:
            node = node.children[0]
            assert node.style == Style(bold=True)
            levels += 1
        assert levels == depth
        assert node.children[0].text == "x"

    def test_limit_is_exact(self):
        tt = TagText.builder().max_depth(3).build()
        tt.parse("<b><i><u>x</u></i></b>")
        with pytest.raises(MaxNestingExceededError):
            tt.parse("<b><i><u><st>x</st></u></i></b>")

    def test_self_referencing_placeholder(self, tagtext):
        with pytest.raises(MaxNestingExceededError):
            tagtext.parse("<loop>", {"loop": "again <loop>"})

    def test_self_referencing_hover_argument(self, tagtext):
        with pytest.raises(MaxNestingExceededError) as exc_info:
            tagtext.parse("<p>", {"p": Literal("<hover:show_text:'<p>'>")})
        assert exc_info.value.limit == NESTED_PARSE_LIMIT
        assert exc_info.value.offset == 0

    def test_nested_argument_limit_follows_max_depth(self):
        tt = TagText.builder().max_depth(2).build()
        source = "<hover:show_text:\"<hover:show_text:'<hover:show_text:z>'>\">x"
        with pytest.raises(MaxNestingExceededError) as exc_info:
            tt.parse(source)
        assert exc_info.value.limit == 2
        assert exc_info.value.offset == 0


class TestErrorFormat:
    def test_format_has_location_and_caret(self, strict):
        with pytest.raises(MarkupError) as exc_info:
            strict.parse("first line\nsome <bold>text")
        text = exc_info.value.format("msg.txt")
        assert text.startswith("error: unclosed tag '<bold>'")
        assert "--> msg.txt:2:6" in text
        assert "2 | some <bold>text" in text
        assert text.rstrip().endswith("^^^^^^")

    def test_str_is_formatted(self, tagtext):
        with pytest.raises(MarkupError) as exc_info:
            tagtext.parse("<nope>")
        assert "unknown placeholder or tag '<nope>'" in str(exc_info.value)
