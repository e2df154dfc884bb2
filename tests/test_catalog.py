from __future__ import annotations

from datetime import date

import pytest

from core.catalog import (
    DEFAULT_CATALOG,
    SheetCatalog,
    SheetSource,
    export_url,
    find_current_sheet,
    find_sheet,
    with_published_id,
)


@pytest.mark.parametrize(
    "today,label",
    [
        (date(2025, 3, 10), "March 25"),
        (date(2026, 1, 2), "January 26"),
        (date(2025, 12, 31), "December 25"),
        # No "October 26" entry: first label containing the month wins.
        (date(2026, 10, 19), "October"),
        # Month matches but no entry carries the year.
        (date(2026, 3, 1), "March 25"),
    ],
)
def test_find_current_sheet(today: date, label: str) -> None:
    assert find_current_sheet(DEFAULT_CATALOG, today).label == label


def test_find_current_sheet_falls_back_to_last_entry() -> None:
    catalog = SheetCatalog(published_id="x", sources=(SheetSource("Spring", "1"), SheetSource("Summer", "2")))
    assert find_current_sheet(catalog, date(2025, 5, 1)).label == "Summer"


def test_find_current_sheet_empty_catalog() -> None:
    assert find_current_sheet(SheetCatalog(published_id="x"), date(2025, 5, 1)) is None


def test_find_sheet() -> None:
    assert find_sheet(DEFAULT_CATALOG, "434994324").label == "January 25"
    assert find_sheet(DEFAULT_CATALOG, " 434994324 ").label == "January 25"
    assert find_sheet(DEFAULT_CATALOG, "nope") is None
    assert find_sheet(DEFAULT_CATALOG, None) is None


def test_export_url() -> None:
    catalog = SheetCatalog(published_id="PUB", sources=(SheetSource("May 25", "42"),))
    source = catalog.sources[0]
    assert export_url(catalog, source) == "https://docs.google.com/spreadsheets/d/e/PUB/pub?gid=42&single=true&output=csv"
    assert export_url(catalog, source, cache_bust=123).endswith("&output=csv&_=123")


def test_with_published_id() -> None:
    assert with_published_id(DEFAULT_CATALOG, "") is DEFAULT_CATALOG
    other = with_published_id(DEFAULT_CATALOG, "OTHER")
    assert other.published_id == "OTHER"
    assert other.sources == DEFAULT_CATALOG.sources
