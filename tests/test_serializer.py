"""Test serialization back to canonical markup and the round-trip property."""

import logging

import pytest

from tagtext.component import NAMED_COLORS, Component, Style, leaf
from tagtext.errors import UnserializableStyleError
from tagtext.facade import TagText
from tagtext.transformations import BOLD, ITALIC

from .conftest import root, styled

ROUND_TRIP = [
    "Click <insert:test>this</insert> to insert!",
    "plain",
    "<bold>a<italic>b</italic>c</bold>",
    "<bold>a<bold>b</bold></bold>",
    "<red>r<#123456>hex</#123456></red>",
    "<!italic>not italic</italic>",
    "<click:open_url:'https://example.com/a'>link</click>",
    "<hover:show_text:'<bold>tip</bold>'>x</hover>",
    "<font:uniform>f</font>",
    "<insert:''>empty arg</insert>",
    "<insert:' padded '>x</insert>",
    "<insert:'it\\'s'>q</insert>",
    "a\\<b\\\\c",
    "<bold></bold>",
]


class TestCanonicalForm:
    def test_plain_text(self, tagtext):
        assert tagtext.serialize(root(leaf("hello"))) == "hello"

    def test_escapes_text(self, tagtext):
        assert tagtext.serialize(root(leaf("<bold> \\"))) == "\\<bold> \\\\"

    def test_alias_normalised(self, tagtext):
        assert tagtext.serialize(tagtext.parse("<b>x</b>")) == "<bold>x</bold>"

    def test_unclosed_gets_closed(self, tagtext):
        assert tagtext.serialize(tagtext.parse("<bold>x")) == "<bold>x</bold>"

    def test_several_aspects_nest_in_registry_order(self, tagtext):
        comp = root(styled(Style(color=NAMED_COLORS["red"], bold=True), "x"))
        assert tagtext.serialize(comp) == "<red><bold>x</bold></red>"

    def test_node_text_before_children(self, tagtext):
        comp = root(Component("a", Style(bold=True), (leaf("b"),)))
        assert tagtext.serialize(comp) == "<bold>ab</bold>"

    def test_quoting(self, tagtext):
        comp = root(styled(Style(insertion="a:b"), "x"))
        assert tagtext.serialize(comp) == "<insert:'a:b'>x</insert>"

    def test_negated_close_tag(self, tagtext):
        comp = root(styled(Style(bold=False), "x"))
        assert tagtext.serialize(comp) == "<!bold>x</bold>"

    def test_convenience_functions(self):
        import tagtext

        tree = tagtext.parse("<bold>x</bold>")
        assert tagtext.serialize(tree) == "<bold>x</bold>"
        assert tagtext.escape("<") == "\\<"
        assert tagtext.strip("<bold>x</bold>") == "x"


class TestRoundTrip:
    @pytest.mark.parametrize("source", ROUND_TRIP)
    def test_parse_serialize_parse(self, tagtext, source):
        tree = tagtext.parse(source)
        assert tagtext.parse(tagtext.serialize(tree)) == tree

    @pytest.mark.parametrize("source", ROUND_TRIP)
    def test_serialize_is_stable(self, tagtext, source):
        once = tagtext.serialize(tagtext.parse(source))
        assert tagtext.serialize(tagtext.parse(once)) == once

    def test_gradient_output_round_trips(self, tagtext):
        tree = tagtext.parse("<gradient:red:blue>abcd</gradient>")
        assert tagtext.parse(tagtext.serialize(tree)) == tree

    def test_placeholder_fragment_round_trips(self, tagtext):
        tree = tagtext.parse("<x>!", {"x": tagtext.parse("<bold>hi</bold>")})
        assert tagtext.parse(tagtext.serialize(tree)) == tree

    def test_deep_tree(self):
        depth = 2_000
        tt = TagText.builder().max_depth(depth + 1).build()
        source = "<bold>" * depth + "x" + "</bold>" * depth
        assert tt.serialize(tt.parse(source)) == source


class TestUnclaimedStyles:
    def test_lenient_drops_with_warning(self, caplog):
        tt = TagText.with_transformations(BOLD)
        comp = root(styled(Style(bold=True, italic=True), "x"))
        with caplog.at_level(logging.WARNING, logger="tagtext.serializer"):
            assert tt.serialize(comp) == "<bold>x</bold>"
        assert "italic" in caplog.text

    def test_strict_raises(self):
        tt = TagText.builder().strict().remove_default_transformations().transformation(BOLD).build()
        comp = root(styled(Style(italic=True), "x"))
        with pytest.raises(UnserializableStyleError) as exc_info:
            tt.serialize(comp)
        assert exc_info.value.fields == ("italic",)

    def test_strict_ok_when_claimed(self):
        tt = TagText.builder().strict().remove_default_transformations().transformations(BOLD, ITALIC).build()
        comp = root(styled(Style(italic=True), "x"))
        assert tt.serialize(comp) == "<italic>x</italic>"
