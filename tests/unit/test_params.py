"""Unit tests for placeholder scanning and template rendering."""

from __future__ import annotations

import pytest

from ifx_odbc.core.enums import ParamType
from ifx_odbc.core.exceptions import (
    MissingParameter,
    ParameterCountMismatch,
    ParameterTypeError,
    TemplateError,
    UnterminatedLiteralError,
)
from ifx_odbc.core.params import (
    coerce_params,
    placeholder_names,
    positional_count,
    render,
    scan_placeholders,
)

# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------


class TestScanPlaceholders:
    def test_positional(self) -> None:
        phs = scan_placeholders("SELECT * FROM t WHERE a = ? AND b = ?")
        assert [ph.positional for ph in phs] == [True, True]

    def test_named_offsets(self) -> None:
        sql = "SELECT * FROM t WHERE id = :id"
        (ph,) = scan_placeholders(sql)
        assert ph.name == "id"
        assert sql[ph.start : ph.end] == ":id"

    def test_typecast_exclusion(self) -> None:
        assert placeholder_names("SELECT value::integer FROM t WHERE id = :id") == ["id"]

    def test_database_table_reference_excluded(self) -> None:
        assert placeholder_names("SELECT * FROM stores:customer WHERE id = :id") == ["id"]

    def test_string_literal_exclusion(self) -> None:
        sql = "SELECT * FROM t WHERE col = ':not_a_param' AND id = :id"
        assert placeholder_names(sql) == ["id"]

    def test_question_mark_in_literal_ignored(self) -> None:
        assert positional_count("SELECT 'why?' FROM t WHERE a = ?") == 1

    def test_comment_ignored(self) -> None:
        sql = "SELECT a -- :skipped ?\nFROM t /* :also ? */ WHERE a = :real"
        assert placeholder_names(sql) == ["real"]
        assert positional_count(sql) == 0

    def test_quoted_identifier_ignored(self) -> None:
        assert placeholder_names('SELECT ":odd" FROM t WHERE a = :a') == ["a"]

    def test_duplicate_names_listed_once(self) -> None:
        assert placeholder_names("SELECT * FROM t WHERE a = :val OR b = :val") == ["val"]

    def test_longest_name_matched(self) -> None:
        assert placeholder_names("WHERE tabid = :bind_tabid AND x = :bind") == [
            "bind_tabid",
            "bind",
        ]

    def test_unterminated_literal_raises(self) -> None:
        with pytest.raises(UnterminatedLiteralError, match="string literal"):
            scan_placeholders("SELECT 'oops FROM t")


class TestCoerceParams:
    def test_none_passthrough(self) -> None:
        assert coerce_params(None) is None

    def test_dict_passthrough(self) -> None:
        p = {"id": 1}
        assert coerce_params(p) is p

    def test_list_converted_to_tuple(self) -> None:
        assert coerce_params([1, 2]) == (1, 2)

    def test_str_scalar_wrapped(self) -> None:
        assert coerce_params("hello") == ("hello",)

    def test_empty_list_converted(self) -> None:
        assert coerce_params([]) == ()


# ---------------------------------------------------------------------------
# Positional rendering
# ---------------------------------------------------------------------------


class TestRenderPositional:
    def test_values_in_order(self) -> None:
        sql = render("SELECT * FROM t WHERE a = ? AND b = ? AND c = ?", ["x", 2, "y z"])
        assert sql == "SELECT * FROM t WHERE a = 'x' AND b = 2 AND c = 'y z'"
        assert "?" not in sql

    def test_scalar_param(self) -> None:
        assert render("SELECT * FROM t WHERE name = ?", "Smith") == (
            "SELECT * FROM t WHERE name = 'Smith'"
        )

    def test_non_ascii_digits_quoted(self) -> None:
        sql = render("SELECT * FROM t WHERE code = ?", ["١٢٣"])
        assert sql == "SELECT * FROM t WHERE code = '١٢٣'"

    def test_too_few_values(self) -> None:
        template = "SELECT * FROM t WHERE a = ? AND b = ?"
        with pytest.raises(ParameterCountMismatch, match="Not enough bind values") as exc:
            render(template, [1])
        assert template in str(exc.value)
        assert exc.value.expected == 2
        assert exc.value.supplied == 1

    def test_too_many_values(self) -> None:
        with pytest.raises(ParameterCountMismatch, match="More bind values"):
            render("SELECT * FROM t WHERE a = ?", [1, 2])

    def test_no_placeholders_with_values(self) -> None:
        with pytest.raises(ParameterCountMismatch):
            render("SELECT 1", [1])

    def test_no_placeholders_no_values(self) -> None:
        assert render("SELECT 1") == "SELECT 1"

    def test_positional_type_hint(self) -> None:
        sql = render("SELECT * FROM t WHERE code = ?", ["0001234"], types={1: "string"})
        assert sql == "SELECT * FROM t WHERE code = '0001234'"

    def test_quote_in_value_escaped(self) -> None:
        assert render("SELECT * FROM t WHERE name = ?", ["O'Neil"]) == (
            "SELECT * FROM t WHERE name = 'O''Neil'"
        )

    def test_question_mark_in_value_not_rescanned(self) -> None:
        sql = render("SELECT * FROM t WHERE a = ? AND b = ?", ["what?", "x"])
        assert sql == "SELECT * FROM t WHERE a = 'what?' AND b = 'x'"

    def test_mapping_for_positional_template(self) -> None:
        with pytest.raises(TemplateError, match="sequence"):
            render("SELECT * FROM t WHERE a = ?", {"a": 1})

    def test_negative_after_minus_does_not_form_comment(self) -> None:
        assert render("SELECT 10 -?", [-5]) == "SELECT 10 - -5"


# ---------------------------------------------------------------------------
# Named rendering
# ---------------------------------------------------------------------------


class TestRenderNamed:
    def test_basic(self) -> None:
        assert render("SELECT * FROM t WHERE id = :id", {"id": 7}) == (
            "SELECT * FROM t WHERE id = 7"
        )

    def test_longest_name_wins(self) -> None:
        sql = render(
            "SELECT * FROM systables WHERE tabid = :bind_tabid",
            {"bind": "x", "bind_tabid": "y"},
        )
        assert sql == "SELECT * FROM systables WHERE tabid = 'y'"

    def test_repeated_name(self) -> None:
        assert render("WHERE a = :v OR b = :v", {"v": "k"}) == "WHERE a = 'k' OR b = 'k'"

    def test_colon_in_value_not_rescanned(self) -> None:
        sql = render("WHERE a = :a AND b = :b", {"a": ":b", "b": "x"})
        assert sql == "WHERE a = ':b' AND b = 'x'"

    def test_missing_parameter(self) -> None:
        with pytest.raises(MissingParameter, match='"id"'):
            render("SELECT * FROM t WHERE id = :id", {})

    def test_missing_without_params(self) -> None:
        with pytest.raises(MissingParameter):
            render("SELECT * FROM t WHERE id = :id")

    def test_extra_keys_ignored(self) -> None:
        assert render("WHERE id = :id", {"id": 1, "unused": 2}) == "WHERE id = 1"

    def test_sequence_for_named_template(self) -> None:
        with pytest.raises(TemplateError, match="mapping"):
            render("WHERE id = :id", [1])

    def test_mixed_styles_rejected(self) -> None:
        with pytest.raises(TemplateError, match="mixes"):
            render("WHERE a = :a AND b = ?", {"a": 1})

    def test_numeric_hint_rejects_text(self) -> None:
        with pytest.raises(ParameterTypeError):
            render("WHERE id = :id", {"id": "1 OR 1=1"}, types={"id": "numeric"})

    def test_force_string(self) -> None:
        assert render("WHERE id = :id", {"id": 5}, force_string=True) == "WHERE id = '5'"

    def test_none_renders_null(self) -> None:
        assert render("WHERE id = :id", {"id": None}) == "WHERE id = NULL"

    def test_end_to_end_numeric_hints(self) -> None:
        sql = render(
            "SELECT FIRST :n tabname FROM systables WHERE tabid < :max",
            {"n": 3, "max": 10},
            types={"n": ParamType.NUMERIC, "max": "numeric"},
        )
        assert sql == "SELECT FIRST 3 tabname FROM systables WHERE tabid < 10"


class TestRenderScopes:
    def test_scope_fallback(self) -> None:
        assert render("WHERE id = :id", {}, scopes=[{"id": 4}]) == "WHERE id = 4"

    def test_params_win_over_scopes(self) -> None:
        assert render("WHERE id = :id", {"id": 1}, scopes=[{"id": 4}]) == "WHERE id = 1"

    def test_nearest_scope_first(self) -> None:
        sql = render("WHERE id = :id", None, scopes=[{"id": 1}, {"id": 2}])
        assert sql == "WHERE id = 1"

    def test_callable_scope(self) -> None:
        def lookup(name: str) -> str:
            if name == "who":
                return "me"
            raise KeyError(name)

        assert render("WHERE u = :who", None, scopes=[lookup]) == "WHERE u = 'me'"

    def test_depth_bounded(self) -> None:
        scopes = [{}, {}, {}, {"id": 9}]
        with pytest.raises(MissingParameter):
            render("WHERE id = :id", None, scopes=scopes)

    def test_custom_depth(self) -> None:
        scopes = [{}, {}, {}, {"id": 9}]
        assert render("WHERE id = :id", None, scopes=scopes, max_scope_depth=4) == (
            "WHERE id = 9"
        )
