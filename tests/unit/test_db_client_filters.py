"""Tests for the filter grammar shared by the SQLite client and the in-memory double."""

import pytest

from src.core.db_client import parse_comparison, parse_filter, sanitize_param, split_top_level


@pytest.mark.unit
class TestParseComparison:
    @pytest.mark.parametrize("value", ["o'brien", 'fam"x', "back\\slash", "a && b", "(x || y)", "Zoë"])
    def test_sanitized_values_round_trip(self, value):
        assert parse_comparison(f'family_id = "{sanitize_param(value)}"') == ("family_id", "=", value)

    def test_single_quoted_value_is_literal(self):
        assert parse_comparison("title ~ 'say \"hi\"'") == ("title", "~", 'say "hi"')

    def test_operators(self):
        assert parse_comparison('parent_task_id != ""') == ("parent_task_id", "!=", "")
        assert parse_comparison('created >= "2030"') == ("created", ">=", "2030")

    @pytest.mark.parametrize("text", ["garbage", 'title = "unterminated', 'title = "a" extra', '= "x"'])
    def test_invalid_syntax(self, text):
        with pytest.raises(ValueError, match="Invalid filter syntax"):
            parse_comparison(text)


@pytest.mark.unit
class TestSplitTopLevel:
    def test_ignores_separators_inside_quotes_and_groups(self):
        text = 'title = "a && b" && (x = "1" || y = "2") && z = "3"'

        assert split_top_level(text, "&&") == ['title = "a && b"', '(x = "1" || y = "2")', 'z = "3"']

    def test_escaped_quote_does_not_end_value(self):
        text = f'family_id = "{sanitize_param(chr(34) + " && ")}" && title = "t"'

        assert len(split_top_level(text, "&&")) == 2

    def test_unbalanced_input_rejected(self):
        with pytest.raises(ValueError):
            split_top_level('(title = "a"', "&&")


@pytest.mark.unit
class TestParseFilter:
    def test_values_are_bound_not_interpolated(self):
        family = "o'brien\" OR 1=1 --"

        where, params = parse_filter(f'family_id = "{sanitize_param(family)}" && parent_task_id != ""')

        assert where == "family_id = ? AND parent_task_id != ?"
        assert params == [family, ""]

    def test_or_group(self):
        where, params = parse_filter("(creator_id = \"d'arcy\" || assigned_to_id = \"d'arcy\")")

        assert where == "(creator_id = ? OR assigned_to_id = ?)"
        assert params == ["d'arcy", "d'arcy"]

    def test_like_escapes_wildcards(self):
        where, params = parse_filter('title ~ "100%"')

        assert where == "title LIKE ? ESCAPE '\\'"
        assert params == ["%100\\%%"]

    def test_empty_filter(self):
        assert parse_filter("") == ("", [])
