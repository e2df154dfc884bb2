from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import pandas as pd

from core.charts import member_cost_chart, to_vega_spec
from core.data import format_plain, format_taka, round_half_up
from core.filters import DashboardFilters
from core.ledger import LedgerSummary, MemberRecord, ledger_totals


def _member_card(index: int, member: MemberRecord) -> Dict[str, Any]:
    return {
        "index": index,
        "name": member.name,
        "initial": member.name[:1].upper(),
        "values": asdict(member),
        "display": {
            "total_meals": format_plain(member.total_meals),
            "bazar_cost": format_taka(member.bazar_cost, rounded=True),
            "maid_bill": format_taka(member.maid_bill),
            "extra_expenses": format_taka(member.extra_expenses),
            "total_cost": format_taka(member.total_cost, rounded=True),
            "deposit": format_taka(member.deposit),
            "due": format_taka(member.due),
        },
    }


def compute_overview(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    summary: LedgerSummary = ctx.get("summary") or LedgerSummary()
    members: List[MemberRecord] = ctx.get("members") or []
    frame: pd.DataFrame = ctx.get("members_frame", pd.DataFrame())
    current = ctx.get("current_sheet")
    last_updated = ctx.get("last_updated")

    chart = member_cost_chart(frame) if not frame.empty else None
    return {
        "filters": asdict(filters),
        "sheet": asdict(current) if current is not None else None,
        "last_updated": last_updated.isoformat() if last_updated is not None else None,
        "error": ctx.get("error"),
        "summary": {
            **asdict(summary),
            "display": {
                "total_meals": format_plain(round_half_up(summary.total_meals)),
                "member_count": str(summary.member_count),
                "total_bazar": format_plain(round_half_up(summary.total_bazar)),
                "meal_rate": f"{summary.meal_rate:.2f}",
            },
        },
        "members": [_member_card(i, m) for i, m in enumerate(members)],
        "totals": ledger_totals(members),
        "member_cost_chart": to_vega_spec(chart) if chart is not None else None,
    }
