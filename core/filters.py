from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class DashboardFilters:
    sheet_id: Optional[str] = None
    search_query: str = ""


def normalize_filters(raw: Optional[dict]) -> DashboardFilters:
    raw = raw or {}
    sheet_id = raw.get("sheet_id")
    sheet_id = str(sheet_id).strip() if sheet_id is not None else ""
    search_query = str(raw.get("search_query") or "").strip()
    return DashboardFilters(sheet_id=sheet_id or None, search_query=search_query)


def filter_rows(rows: Sequence[Sequence[str]], query: str) -> List[List[str]]:
    term = (query or "").lower().strip()
    if not term:
        return [list(r) for r in rows]
    return [list(r) for r in rows if any(term in c.lower() for c in r)]
