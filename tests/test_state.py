from __future__ import annotations

from datetime import datetime

from core.catalog import SheetSource
from core.csv_parser import ParsedSheet
from core.filters import DashboardFilters, filter_rows, normalize_filters
from core.state import (
    DashboardState,
    DashboardStore,
    begin_fetch,
    fetch_failed,
    fetch_succeeded,
    is_stale,
    select_sheet,
    set_search,
)

MAY = SheetSource("May 25", "335063292")
JUNE = SheetSource("June 25", "397753033")


def test_begin_fetch_requires_selected_sheet() -> None:
    state, started = begin_fetch(DashboardState())
    assert started is False
    assert state.is_loading is False


def test_begin_fetch_skips_when_already_loading() -> None:
    state, started = begin_fetch(select_sheet(DashboardState(), MAY))
    assert started is True
    assert state.is_loading is True

    again, started_again = begin_fetch(state)
    assert started_again is False
    assert again is state


def test_fetch_succeeded_stores_sheet() -> None:
    now = datetime(2025, 5, 3, 12, 0, 0)
    sheet = ParsedSheet(headers=["Name"], rows=[["Alice"]])
    state, _ = begin_fetch(select_sheet(DashboardState(), MAY))
    state = fetch_succeeded(state, MAY, sheet, now)
    assert state.sheet == sheet
    assert state.loaded_sheet == MAY
    assert is_stale(state) is False
    assert state.last_updated == now
    assert state.is_loading is False
    assert state.error is None


def test_fetch_for_previous_selection_stays_loading() -> None:
    now = datetime(2025, 5, 3, 12, 0, 0)
    state, _ = begin_fetch(select_sheet(DashboardState(), MAY))
    state = select_sheet(state, JUNE)
    state = fetch_succeeded(state, MAY, ParsedSheet(headers=["Name"], rows=[["MayOnly"]]), now)
    assert state.loaded_sheet == MAY
    assert state.current_sheet == JUNE
    assert is_stale(state) is True
    assert state.is_loading is True


def test_fetch_failed_keeps_previous_data() -> None:
    sheet = ParsedSheet(headers=["Name"], rows=[["Alice"]])
    now = datetime(2025, 5, 3, 12, 0, 0)
    state = fetch_succeeded(select_sheet(DashboardState(), MAY), MAY, sheet, now)
    state, _ = begin_fetch(state)
    state = fetch_failed(state, "boom")
    assert state.sheet == sheet
    assert state.last_updated == now
    assert state.error == "boom"
    assert state.is_loading is False


def test_select_sheet_clears_error() -> None:
    state = fetch_failed(select_sheet(DashboardState(), MAY), "boom")
    state = select_sheet(state, JUNE)
    assert state.current_sheet == JUNE
    assert state.error is None


def test_store_dispatch_and_try_begin_fetch() -> None:
    store = DashboardStore()
    store.dispatch(select_sheet, MAY)
    store.dispatch(set_search, "ali")
    assert store.state.search_query == "ali"
    _, started = store.try_begin_fetch()
    assert started is True
    _, started = store.try_begin_fetch()
    assert started is False


def test_normalize_filters() -> None:
    assert normalize_filters(None) == DashboardFilters()
    assert normalize_filters({"sheet_id": " 42 ", "search_query": "  Ali "}) == DashboardFilters(sheet_id="42", search_query="Ali")
    assert normalize_filters({"sheet_id": "", "search_query": None}) == DashboardFilters()


def test_filter_rows_is_case_insensitive_substring() -> None:
    rows = [["Alice", "20"], ["Bob", "18"], ["Total", "38"]]
    assert filter_rows(rows, "") == rows
    assert filter_rows(rows, "  ") == rows
    assert filter_rows(rows, "ALI") == [["Alice", "20"]]
    assert filter_rows(rows, "8") == [["Bob", "18"], ["Total", "38"]]
    assert filter_rows(rows, "zzz") == []
