"""Test template escaping, rendering and compilation."""

import re

import pytest

from ircbridge.templates import (
    check_template_round_trip,
    compile_template,
    escape_regex,
    escaped_placeholder,
    render_template,
    template_to_regex,
)

METACHARS = ".*+?^${}()|[]\\"


class TestEscapeRegex:
    """Test regex escaping of literal text."""

    @pytest.mark.parametrize("char", list(METACHARS))
    def test_each_metachar_matches_only_itself(self, char):
        pattern = re.compile(escape_regex(char))
        assert pattern.fullmatch(char)
        assert not pattern.fullmatch("a")

    def test_escape_prefixes_backslash(self):
        assert escape_regex("a.b*c") == r"a\.b\*c"

    def test_escape_leaves_plain_text(self):
        assert escape_regex("#irc_@bob-1:") == "#irc_@bob-1:"

    def test_escape_empty(self):
        assert escape_regex("") == ""

    def test_escaped_placeholder_is_single_escape(self):
        assert escaped_placeholder("$NICK") == r"\$NICK"


class TestRenderTemplate:
    """Test forward rendering."""

    def test_replaces_every_occurrence(self):
        assert render_template("$NICK (IRC) $NICK", {"$NICK": "bob"}) == "bob (IRC) bob"

    def test_values_are_not_escaped(self):
        assert render_template("@$SERVER_$NICK", {"$SERVER": "irc.example.net", "$NICK": "b.b"}) == (
            "@irc.example.net_b.b"
        )

    def test_unknown_placeholders_left_alone(self):
        assert render_template("$CHANNEL", {"$NICK": "bob"}) == "$CHANNEL"


class TestTemplateToRegex:
    """Test template compilation to regex."""

    def test_literal_vars_are_escaped(self):
        # Arrange
        suffix = ":" + escape_regex("example.org")

        # Act
        regex = template_to_regex("@$SERVER_$NICK", {"$SERVER": "irc.example.net"}, {"$NICK": "(.*?)"}, suffix)

        # Assert
        assert regex == r"@irc\.example\.net_(.*?):example\.org"

    def test_template_metachars_are_literal(self):
        pattern = compile_template("[$NICK]", {}, {"$NICK": "(.*)"})
        assert pattern.fullmatch("[bob]").group(1) == "bob"
        assert not pattern.fullmatch("xbobx")

    def test_regex_var_replaced_everywhere(self):
        assert template_to_regex("$NICK|$NICK", {}, {"$NICK": "(.*)"}) == r"(.*)\|(.*)"

    def test_fragment_inserted_verbatim(self):
        assert template_to_regex("$NICK", {}, {"$NICK": r"(\d+)"}) == r"(\d+)"

    def test_suffix_appended_unescaped(self):
        assert template_to_regex("x", {}, {}, "$") == "x$"

    def test_literal_placeholder_never_becomes_regex(self):
        # $SERVER is substituted literally before the regex vars are applied
        regex = template_to_regex("$SERVER$NICK", {"$SERVER": "a.b"}, {"$NICK": ".*"})
        assert regex == r"a\.b.*"


class TestCompileTemplate:
    def test_compiled_patterns_are_cached(self):
        first = compile_template("@$NICK", {}, {"$NICK": "(.*)"}, ":hs")
        second = compile_template("@$NICK", {}, {"$NICK": "(.*)"}, ":hs")
        assert first is second

    def test_round_trip_check(self):
        pattern = compile_template("@$NICK", {}, {"$NICK": "(.*?)"}, ":hs")
        assert check_template_round_trip(pattern, "@bob:hs", "bob")
        assert not check_template_round_trip(pattern, "@bob:other", "bob")

    def test_round_trip_check_without_group(self):
        pattern = compile_template("@bot", {}, {"$NICK": "(.*?)"}, ":hs")
        assert not check_template_round_trip(pattern, "@bot:hs", "bot")
