from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

from core.csv_parser import ParsedSheet, display_headers
from core.filters import DashboardFilters, filter_rows

NO_DATA_MESSAGE = "No data available for this month"


def compute_table(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    sheet: ParsedSheet = ctx.get("sheet") or ParsedSheet()
    rows = filter_rows(sheet.rows, filters.search_query)
    return {
        "filters": asdict(filters),
        "headers": display_headers(sheet.headers),
        "rows": rows,
        "row_counts": {
            "total_rows": len(sheet.rows),
            "matched_rows": len(rows),
        },
        "message": None if rows else (ctx.get("error") or NO_DATA_MESSAGE),
    }
