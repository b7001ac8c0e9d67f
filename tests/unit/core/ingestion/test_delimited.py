# tests/unit/core/ingestion/test_delimited.py
"""Tests for CSV/TSV parsing and text format dispatch."""

from __future__ import annotations

import pytest

from blockflow.contracts import DatasetParseError
from blockflow.core.ingestion import TextFormat, dedupe_columns, infer_scalar, parse_delimited, parse_text


class TestParseDelimited:
    def test_header_and_rows_stay_text_by_default(self) -> None:
        dataset = parse_delimited("name,age\nAlice,25\nBob,30\n")

        assert dataset.columns == ("name", "age")
        assert dataset.rows == (("Alice", "25"), ("Bob", "30"))

    def test_quoted_fields(self) -> None:
        text = 'a,b\n"A, ""B""","line one\nline two"\n'

        dataset = parse_delimited(text)

        assert dataset.rows == (('A, "B"', "line one\nline two"),)

    def test_crlf_line_endings(self) -> None:
        dataset = parse_delimited("a,b\r\n1,2\r\n")

        assert dataset.rows == (("1", "2"),)

    def test_blank_lines_are_skipped(self) -> None:
        dataset = parse_delimited("a\n\n1\n   \n2\n")

        assert dataset.column_values("a") == ["1", "2"]

    def test_without_header_columns_are_numbered_to_widest_row(self) -> None:
        dataset = parse_delimited("1,2\n3,4,5\n", has_header=False)

        assert dataset.columns == ("Column 1", "Column 2", "Column 3")
        assert dataset.row_count == 2
        assert dataset.column_values("Column 3") == [None, "5"]

    def test_blank_and_repeated_headers(self) -> None:
        dataset = parse_delimited("x,,x,\n1,2,3,4\n")

        assert dataset.columns == ("x", "Unnamed", "x_2", "Unnamed_2")

    def test_dynamic_typing(self) -> None:
        dataset = parse_delimited("n,f,b,s,e\n42,1.5,TRUE,hello,\n", dynamic_typing=True)

        assert dataset.rows == ((42, 1.5, True, "hello", None),)

    def test_max_rows_truncates_body(self) -> None:
        dataset = parse_delimited("a\n1\n2\n3\n", max_rows=2)

        assert dataset.row_count == 2

    def test_tab_delimiter(self) -> None:
        dataset = parse_delimited("a\tb\n1,5\t2\n", delimiter="\t")

        assert dataset.rows == (("1,5", "2"),)

    @pytest.mark.parametrize("text", ["", "   \n\n"])
    def test_empty_input_is_an_error(self, text: str) -> None:
        with pytest.raises(DatasetParseError, match="No data provided"):
            parse_delimited(text)


class TestHelpers:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("7", 7), ("-3", -3), ("2.50", 2.5), ("1e3", 1000.0), ("false", False), ("  ", None), ("12a", "12a")],
    )
    def test_infer_scalar(self, text: str, expected: object) -> None:
        assert infer_scalar(text) == expected

    def test_dedupe_keeps_first_occurrence(self) -> None:
        assert dedupe_columns(["a", "a", "a_2", "a"]) == ["a", "a_2", "a_2_2", "a_3"]


class TestParseText:
    def test_table_format_is_tab_separated(self) -> None:
        dataset = parse_text("a\tb\n1\t2", TextFormat.TABLE)

        assert dataset.columns == ("a", "b")

    def test_json_format_respects_max_rows(self) -> None:
        dataset = parse_text('[{"a": 1}, {"a": 2}, {"a": 3}]', TextFormat.JSON, max_rows=2)

        assert dataset.column_values("a") == [1, 2]

    def test_explicit_delimiter_overrides_format(self) -> None:
        dataset = parse_text("a;b\n1;2", TextFormat.CSV, delimiter=";")

        assert dataset.columns == ("a", "b")
