"""
Tests unitarios del parser de la planilla de inventario.

Verifica la resolucion dinamica de columnas, la validacion por fila y la
exclusion de ids duplicados.
"""
import pytest

from tapes.application.services.inventory_parser import (
    ColumnMap,
    RowParseError,
    classify_row,
    list_tapes,
    parse_inventory,
    parse_row,
    parse_tag_heading,
    resolve_columns,
)
from tapes.domain.entities import Accepted, Rejected, SyncWarning, Tape
from tapes.shared.exceptions import StructuralError, TransportError


HEADINGS = ["id", "title", "year", "runtime", "contributor"]


class TestParseTagHeading:
    """Tests para parse_tag_heading."""

    @pytest.mark.parametrize(
        "heading, expected",
        [
            ("Instructional?", "instructional"),
            ("Arts + Crafts?", "arts+crafts"),
            ("History ?", "history"),
            ("History", ""),
            ("?", ""),
            ("Why? Not?", ""),
            ("", ""),
        ],
    )
    def test_parse_tag_heading(self, heading, expected):
        assert parse_tag_heading(heading) == expected


class TestResolveColumns:
    """Tests para resolve_columns."""

    def test_resolves_plain_headings(self):
        result = resolve_columns(HEADINGS)

        assert result.ok
        assert result.columns == ColumnMap(id=0, title=1, year=2, runtime=3, contributor=4)

    def test_resolves_tag_columns(self):
        result = resolve_columns(HEADINGS + ["Instructional?", "Arts + Crafts?", "History?"])

        assert result.ok
        assert result.columns.tags == {"instructional": 5, "arts+crafts": 6, "history": 7}

    def test_resolves_shuffled_headings_ignoring_unknown_columns(self):
        result = resolve_columns(
            ["", "title", "id", "runtime", "something-else", "padding", "year", "contributor"]
        )

        assert result.ok
        assert result.columns == ColumnMap(id=2, title=1, year=6, runtime=3, contributor=7)

    def test_matching_is_case_insensitive_substring(self):
        result = resolve_columns(
            ["ID", " Title: ", "Year (AD)", "Runtime (min.)", "Contributor (Twitch User)"]
        )

        assert result.ok
        assert result.columns == ColumnMap(id=0, title=1, year=2, runtime=3, contributor=4)

    def test_contributor_id_heading_is_not_the_id_column(self):
        result = resolve_columns(["ID", "Title", "Year", "Runtime", "Contributor ID"])

        assert result.ok
        assert result.columns == ColumnMap(id=0, title=1, year=2, runtime=3, contributor=4)

    def test_contributor_column_may_be_absent(self):
        result = resolve_columns(["id", "title", "year", "runtime"])

        assert result.ok
        assert result.columns.contributor is None

    def test_duplicate_heading_is_an_error(self):
        result = resolve_columns(HEADINGS + ["Title"])

        assert not result.ok
        assert result.error == "duplicate index for 'title' column"

    def test_missing_required_heading_is_an_error(self):
        result = resolve_columns(["id", "title", "year"])

        assert not result.ok
        assert result.error == "could not resolve 'runtime' column"


class TestParseRow:
    """Tests para parse_row / classify_row."""

    @pytest.fixture
    def columns(self):
        return resolve_columns(HEADINGS + ["Horror?", "Comedy?"]).columns

    def test_full_row(self, columns):
        tape = parse_row(columns, ["42", "Tape one", "1991", "60", "12345", "x", ""], 2)

        assert tape == Tape(
            id=42,
            title="Tape one",
            year=1991,
            runtime_minutes=60,
            contributor_id="12345",
            tags=frozenset({"horror"}),
        )
        assert tape.row_number == 2

    def test_short_row_reads_missing_cells_as_empty(self, columns):
        tape = parse_row(columns, ["7", "Short"], 3)

        assert tape.year is None
        assert tape.runtime_minutes is None
        assert tape.contributor_id is None
        assert tape.tags == frozenset()

    def test_blank_tag_cell_does_not_mark_tag(self, columns):
        tape = parse_row(columns, ["1", "t", "", "", "", "  ", "yes"], 2)

        assert tape.tags == frozenset({"comedy"})

    @pytest.mark.parametrize(
        "values, message",
        [
            (["", "t"], "'id' value is required"),
            (["abc", "t"], "'id' value must be an integer (got 'abc')"),
            (["1.0", "t"], "'id' value must be an integer (got '1.0')"),
            (["1", ""], "'title' value is required"),
            (["1", "t", "nineteen"], "'year' value must be an integer (got 'nineteen')"),
            (["1", "t", "-5"], "'year' int value must be positive (got -5)"),
            (["1", "t", "0"], "'year' int value must be positive (got 0)"),
            (["1", "t", "1990", "0"], "'runtime' int value must be positive (got 0)"),
            (["1", "t", "1990", "1.5"], "'runtime' value must be an integer (got '1.5')"),
        ],
    )
    def test_invalid_rows(self, columns, values, message):
        with pytest.raises(RowParseError) as exc_info:
            parse_row(columns, values, 5)
        assert str(exc_info.value) == message

    def test_classify_row_wraps_errors_as_warnings(self, columns):
        outcome = classify_row(columns, ["1", ""], 9)

        assert isinstance(outcome, Rejected)
        assert outcome.warning == SyncWarning(location=9, message="'title' value is required")
        assert str(outcome.warning) == "At row 9: 'title' value is required"

    def test_classify_row_accepts_valid_rows(self, columns):
        outcome = classify_row(columns, ["1", "ok"], 2)

        assert isinstance(outcome, Accepted)
        assert outcome.value.id == 1


class TestParseInventory:
    """Tests para parse_inventory."""

    def test_empty_grid_is_structural_error(self):
        with pytest.raises(StructuralError) as exc_info:
            parse_inventory([])
        assert exc_info.value.message == "inventory spreadsheet has no values"

    def test_unresolved_headings_are_structural_error(self):
        with pytest.raises(StructuralError) as exc_info:
            parse_inventory([["id", "title", "year"], ["1", "a", "1990"]])
        assert exc_info.value.message == (
            "failed to parse headings from first row of inventory spreadsheet: "
            "could not resolve 'runtime' column"
        )

    def test_headings_only(self):
        result = parse_inventory([HEADINGS])

        assert result.tapes == []
        assert result.warnings == []

    def test_tapes_sorted_by_id(self):
        result = parse_inventory([HEADINGS, ["3", "C"], ["1", "A"], ["2", "B"]])

        assert [t.id for t in result.tapes] == [1, 2, 3]
        assert [t.row_number for t in result.tapes] == [3, 4, 2]

    def test_bad_rows_are_dropped_with_row_warnings(self):
        result = parse_inventory(
            [
                HEADINGS,
                ["1", "A", "1990", "60"],
                ["2", "B", "abc", "60"],
                ["3", "C", "1990", "-1"],
                ["4", "D", "", ""],
            ]
        )

        assert [t.id for t in result.tapes] == [1, 4]
        assert result.warnings == [
            SyncWarning(location=3, message="'year' value must be an integer (got 'abc')"),
            SyncWarning(location=4, message="'runtime' int value must be positive (got -1)"),
        ]

    def test_duplicate_ids_exclude_every_row_sharing_the_id(self):
        result = parse_inventory(
            [
                HEADINGS,
                ["5", "First"],
                ["6", "Other"],
                ["5", "Second"],
                ["5", "Third"],
                ["7", "Later"],
            ]
        )

        assert [t.id for t in result.tapes] == [6, 7]
        assert result.warnings == [
            SyncWarning(
                location=4,
                message="duplicate tape ID 5: used by both 'Second' and 'First'; accepting neither",
            )
        ]

    def test_duplicate_warnings_come_after_row_warnings(self):
        result = parse_inventory([HEADINGS, ["9", "X"], ["bad", "Y"], ["9", "Z"]])

        assert result.tapes == []
        assert [w.location for w in result.warnings] == [3, 4]
        assert str(result.warnings[0]) == "At row 3: 'id' value must be an integer (got 'bad')"
        assert result.warnings[1].message.startswith("duplicate tape ID 9")


class TestListTapes:
    """Tests para list_tapes (lectura de la fuente)."""

    def test_reads_and_parses_source(self, make_inventory):
        source = make_inventory([HEADINGS, ["1", "One"]])

        result = list_tapes(source)

        assert [t.title for t in result.tapes] == ["One"]
        assert source.calls == 1

    def test_source_failure_is_transport_error(self, make_inventory):
        source = make_inventory(error=ConnectionError("boom"))

        with pytest.raises(TransportError) as exc_info:
            list_tapes(source)
        assert exc_info.value.message == "failed to get values from inventory spreadsheet: boom"
        assert exc_info.value.details == {"source": "sheets"}

    def test_structural_errors_are_not_wrapped(self, make_inventory):
        with pytest.raises(StructuralError):
            list_tapes(make_inventory([]))
