from __future__ import annotations

from datetime import datetime

from core.catalog import SheetSource
from core.csv_parser import ParsedSheet
from core.data import build_context
from core.filters import DashboardFilters
from core.metrics_overview import compute_overview
from core.metrics_table import NO_DATA_MESSAGE, compute_table
from core.state import DashboardState, fetch_succeeded

SOURCE = SheetSource("May 25", "42")
NOW = datetime(2025, 5, 3, 9, 30, 0)


def _ledger_rows() -> list[list[str]]:
    rows = [[""] * 35 for _ in range(19)]
    rows[0][0] = "Alice"
    rows[0][32] = "20"
    rows[0][33] = "500"
    rows[0][34] = "25.25"
    rows[6][32] = "20"
    rows[7][32] = "1110"
    rows[8][32] = "55.55"
    rows[18][32] = "1200"
    rows[18][34] = "300"
    return rows


def _ctx(sheet: ParsedSheet, error=None) -> dict:
    state = fetch_succeeded(DashboardState(current_sheet=SOURCE), SOURCE, sheet, NOW)
    if error:
        state = DashboardState(current_sheet=SOURCE, loaded_sheet=SOURCE, sheet=sheet, last_updated=NOW, error=error)
    return build_context(state)


def test_compute_overview_payload() -> None:
    payload = compute_overview(DashboardFilters(sheet_id="42"), _ctx(ParsedSheet(headers=["Name"], rows=_ledger_rows())))
    assert payload["sheet"] == {"label": "May 25", "remote_id": "42"}
    assert payload["last_updated"] == "2025-05-03T09:30:00"
    assert payload["summary"]["member_count"] == 1
    assert payload["summary"]["display"]["meal_rate"] == "55.55"

    alice = payload["members"][0]
    assert alice["name"] == "Alice"
    assert alice["initial"] == "A"
    assert alice["display"]["total_meals"] == "20"
    assert alice["display"]["bazar_cost"] == "৳1111"
    assert alice["display"]["extra_expenses"] == "৳25.25"
    assert alice["display"]["total_cost"] == "৳1636"
    assert alice["display"]["deposit"] == "৳1200"
    assert alice["display"]["due"] == "৳300"
    assert len(payload["members"]) == 6
    assert "bar" in str(payload["member_cost_chart"]["mark"])


def test_compute_overview_empty_sheet() -> None:
    payload = compute_overview(DashboardFilters(), _ctx(ParsedSheet()))
    assert payload["summary"]["display"] == {
        "total_meals": "0",
        "member_count": "0",
        "total_bazar": "0",
        "meal_rate": "0.00",
    }
    assert [m["name"] for m in payload["members"]][:2] == ["Member 1", "Member 2"]
    assert payload["totals"]["total_cost"] == 0


def test_compute_table_filters_rows() -> None:
    sheet = ParsedSheet(headers=["Name", ""], rows=[["Alice", "20"], ["Bob", "18"]])
    payload = compute_table(DashboardFilters(search_query="bo"), _ctx(sheet))
    assert payload["headers"] == ["Name", "Column 2"]
    assert payload["rows"] == [["Bob", "18"]]
    assert payload["row_counts"] == {"total_rows": 2, "matched_rows": 1}
    assert payload["message"] is None


def test_compute_table_no_rows_message() -> None:
    payload = compute_table(DashboardFilters(), _ctx(ParsedSheet(headers=["Name"])))
    assert payload["message"] == NO_DATA_MESSAGE
    payload = compute_table(DashboardFilters(), _ctx(ParsedSheet(), error="Failed"))
    assert payload["message"] == "Failed"
