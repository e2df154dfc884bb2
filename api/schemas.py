from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class DashboardFiltersModel(BaseModel):
    sheet_id: Optional[str] = None
    search_query: str = ""
