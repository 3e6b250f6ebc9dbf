from __future__ import annotations

import numpy as np
import pytest

from scatterview.cleaning import RecordCleaner
from scatterview.derived_fields import DerivedField, compile_expression, normalize_derived
from scatterview.errors import LoadError
from scatterview.field_convert import to_number
from scatterview.records import Record, index_records


def _row(**overrides):
    row = {
        "ASIN": "0385537859",
        "title": "Some Book",
        "authors": ["First Author", "Second Author"],
        "url": "https://example.org/dp/0385537859",
        "pages": "320",
        "sales_rank": "1,000",
    }
    row.update(overrides)
    return row


def _books_cleaner() -> RecordCleaner:
    return RecordCleaner(
        ("pages", "sales_rank"),
        derived={"log_sales_rank": "log10(sales_rank)"},
        id_field="ASIN",
    )


# --- field conversion -------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(3, 3.0), (2.5, 2.5), (" 312 ", 312.0), ("1,024", 1024.0), ("1_000", 1000.0), ("1e3", 1000.0)],
)
def test_to_number_accepts_numeric_like_values(raw, expected) -> None:
    assert to_number(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", [True, "", "abc", "sqrt(-1)", None, "nan", "inf", "3/4", "pi", "9**9**8"])
def test_to_number_rejects_non_numeric_values(raw) -> None:
    with pytest.raises(ValueError):
        to_number(raw, field="pages")


def test_to_number_error_names_the_field() -> None:
    with pytest.raises(ValueError, match="'pages'"):
        to_number("abc", field="pages")


# --- derived fields ---------------------------------------------------------


def test_log10_derived_field_is_exact_for_powers_of_ten() -> None:
    field = DerivedField("log_sales_rank", "log10(sales_rank)")
    assert field.inputs == ("sales_rank",)
    np.testing.assert_array_equal(
        field.evaluate({"sales_rank": np.array([10.0, 1000.0])}), [1.0, 3.0]
    )


def test_derived_field_over_several_inputs_and_constants() -> None:
    ratio = DerivedField("ratio", "pages / sales_rank")
    assert ratio.inputs == ("pages", "sales_rank")
    out = ratio.evaluate({"pages": np.array([10.0, 20.0]), "sales_rank": np.array([5.0, 4.0])})
    np.testing.assert_allclose(out, [2.0, 5.0])


def test_compile_expression_is_cached() -> None:
    assert compile_expression("log10(sales_rank)") is compile_expression("log10(sales_rank)")


def test_compile_expression_rejects_constants_and_garbage() -> None:
    with pytest.raises(ValueError, match="does not reference any field"):
        compile_expression("2 + 3")
    with pytest.raises(ValueError):
        compile_expression("log10(")


def test_derived_field_reports_missing_inputs() -> None:
    with pytest.raises(KeyError, match="sales_rank"):
        DerivedField("x", "log10(sales_rank)").evaluate({"pages": np.array([1.0])})


def test_normalize_derived_accepts_mapping_or_fields() -> None:
    assert normalize_derived(None) == ()
    assert normalize_derived({"a": "b * 2"}) == (DerivedField("a", "b * 2"),)
    fields = (DerivedField("a", "b"),)
    assert normalize_derived(fields) == fields


# --- cleaner ----------------------------------------------------------------


def test_cleaner_builds_immutable_records_with_derived_fields() -> None:
    records = _books_cleaner().clean([_row()])
    assert len(records) == 1
    record = records[0]
    assert record.id == "0385537859"
    assert record.authors == ("First Author", "Second Author")
    assert record["pages"] == 320.0
    assert record["sales_rank"] == 1000.0
    assert record["log_sales_rank"] == 3.0
    with pytest.raises(TypeError):
        record.values["pages"] = 1.0  # type: ignore[index]


def test_cleaner_wraps_a_single_author_string() -> None:
    record = _books_cleaner().clean([_row(authors="Solo Writer")])[0]
    assert record.authors == ("Solo Writer",)


def test_cleaner_preserves_input_order() -> None:
    rows = [_row(ASIN=str(i), sales_rank=10**i) for i in range(1, 4)]
    records = _books_cleaner().clean(rows)
    assert [r.id for r in records] == ["1", "2", "3"]
    assert [r["log_sales_rank"] for r in records] == [1.0, 2.0, 3.0]


@pytest.mark.parametrize(
    ("row", "message"),
    [
        (_row(pages=None), "missing required field 'pages'"),
        ({k: v for k, v in _row().items() if k != "url"}, "missing required field 'url'"),
        (_row(pages="many"), "Row 0"),
        (_row(sales_rank=0), "not finite"),
        (_row(authors={"name": "x"}), "authors"),
        (["not", "an", "object"], "not an object"),
    ],
)
def test_cleaner_rejects_bad_rows(row, message) -> None:
    with pytest.raises(LoadError, match=message):
        _books_cleaner().clean([row], source="books.json")


@pytest.mark.parametrize("raw", ["9**9**8", "pi", "sqrt(2)", "3/4"])
def test_cleaner_never_evaluates_expression_strings(raw) -> None:
    with pytest.raises(LoadError, match="Row 0: Could not convert"):
        _books_cleaner().clean([_row(pages=raw)], source="books.json")


def test_cleaner_rejects_duplicate_ids() -> None:
    with pytest.raises(LoadError, match="duplicate id"):
        _books_cleaner().clean([_row(), _row()])


def test_load_error_mentions_source() -> None:
    with pytest.raises(LoadError) as info:
        _books_cleaner().clean([_row(pages="many")], source="books.json")
    assert info.value.source == "books.json"
    assert "(source: books.json)" in str(info.value)


def test_cleaner_reports_derived_fields_with_unknown_inputs() -> None:
    cleaner = RecordCleaner(("pages",), derived={"bad": "log10(nope)"})
    with pytest.raises(LoadError, match="nope"):
        cleaner.clean([_row()])


def test_record_lookup_and_identity() -> None:
    a = Record("A", "T", ("x",), "u", {"pages": 1})
    b = Record("A", "T", ("x",), "u", {"pages": 1.0})
    assert a == b
    assert hash(a) == hash(b)
    with pytest.raises(KeyError, match="no numeric field"):
        a["missing"]
    with pytest.raises(ValueError, match="Duplicate"):
        index_records([a, b])
