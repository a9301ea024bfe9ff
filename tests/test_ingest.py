"""Tests for CSV parsing used by the ingest command."""

from __future__ import annotations

import pytest

from cli.ingest import read_measurements_csv


def test_parses_rows_and_normalizes_timestamps(tmp_path) -> None:
    path = tmp_path / "data.csv"
    path.write_text(
        "CreatedAt , Value\n"
        "2023-10-01T12:00:00Z,25.5\n"
        "2023-10-01T14:05:00+02:00,60\n"
        "2023-10-01T12:10:00,101325.0\n"
    )

    batch = read_measurements_csv(path)

    assert batch.errors == []
    assert batch.measurements == [
        {"createdAt": "2023-10-01T12:00:00Z", "value": 25.5},
        {"createdAt": "2023-10-01T12:05:00Z", "value": 60.0},
        {"createdAt": "2023-10-01T12:10:00Z", "value": 101325.0},
    ]


def test_reports_bad_rows_with_line_numbers(tmp_path) -> None:
    path = tmp_path / "data.csv"
    path.write_text(
        "createdAt,value\n"
        ",1\n"
        "yesterday,1\n"
        "2023-10-01T12:00:00Z,\n"
        "2023-10-01T12:00:00Z,abc\n"
    )

    batch = read_measurements_csv(path)

    assert batch.measurements == []
    assert batch.errors == [
        "row 2: missing createdAt",
        "row 3: invalid createdAt",
        "row 4: missing value",
        "row 5: invalid numeric value",
    ]


def test_missing_columns_raise(tmp_path) -> None:
    path = tmp_path / "data.csv"
    path.write_text("timestamp,reading\n2023-10-01T12:00:00Z,1\n")

    with pytest.raises(ValueError, match="createdat, value"):
        read_measurements_csv(path)


def test_empty_file_raises(tmp_path) -> None:
    path = tmp_path / "data.csv"
    path.write_text("")

    with pytest.raises(ValueError, match="header"):
        read_measurements_csv(path)


def test_non_finite_values_are_rejected(tmp_path) -> None:
    path = tmp_path / "data.csv"
    path.write_text(
        "createdAt,value\n"
        "2023-10-01T12:00:00Z,nan\n"
        "2023-10-01T12:01:00Z,inf\n"
        "2023-10-01T12:02:00Z,-Infinity\n"
        "2023-10-01T12:03:00Z,4.5\n"
    )

    batch = read_measurements_csv(path)

    assert batch.measurements == [{"createdAt": "2023-10-01T12:03:00Z", "value": 4.5}]
    assert batch.errors == [
        "row 2: invalid numeric value",
        "row 3: invalid numeric value",
        "row 4: invalid numeric value",
    ]
