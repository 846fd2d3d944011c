from __future__ import annotations

from datetime import date, datetime, time

import pytest

from learner_report.excel.cell_format import format_cell


@pytest.mark.parametrize(
    "value,number_format,expected",
    [
        (None, "General", None),
        ("6/17", "@", "6/17"),
        (18, "General", "18"),
        (18.0, "General", "18"),
        (18.5, "0.0", "18.5"),
        (True, "General", "TRUE"),
        (6 / 17, "# ?/??", "6/17"),
        (1.5, "# ?/?", "1 1/2"),
        (1.5, "?/?", "3/2"),
        (0.5, "# ?/8", "4/8"),
        (2.0, "# ?/??", "2"),
        (-0.25, "# ?/?", "-1/4"),
        (0.35, "0%", "35%"),
        (0.3529, "0.00%", "35.29%"),
    ],
)
def test_format_cell_numbers(value, number_format, expected):
    assert format_cell(value, number_format) == expected


@pytest.mark.parametrize(
    "value,number_format,expected",
    [
        (datetime(2025, 6, 17), "m/d", "6/17"),
        (datetime(2025, 6, 17), "mm/dd", "06/17"),
        (datetime(2025, 6, 17), "[$-409]m/d;@", "6/17"),
        (datetime(2025, 6, 17), "d-mmm-yy", "17-Jun-25"),
        (datetime(2025, 6, 17, 14, 5, 9), "yyyy-mm-dd hh:mm:ss", "2025-06-17 14:05:09"),
        (datetime(2025, 6, 17, 14, 5), "h:mm AM/PM", "2:05 PM"),
        (time(9, 30), "h:mm", "9:30"),
        (date(2025, 6, 17), "General", "2025-06-17"),
    ],
)
def test_format_cell_dates(value, number_format, expected):
    assert format_cell(value, number_format) == expected
