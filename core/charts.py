from __future__ import annotations

from typing import Any, Dict, Optional

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

COST_PARTS = {
    "bazar_cost": "Bazar Cost",
    "maid_bill": "Maid Bill",
    "extra_expenses": "Extra Expenses",
}


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def member_cost_chart(members: pd.DataFrame) -> Optional[alt.Chart]:
    if members.empty or "name" not in members.columns:
        return None
    cols = [c for c in COST_PARTS if c in members.columns]
    long_df = (
        members[["name"] + cols]
        .melt(id_vars="name", value_vars=cols, var_name="part", value_name="amount")
        .assign(part=lambda d: d["part"].map(COST_PARTS), amount=lambda d: d["amount"].astype(float))
    )
    return (
        alt.Chart(long_df)
        .mark_bar()
        .encode(
            x=alt.X("name:N", title="Member", sort=list(members["name"])),
            y=alt.Y("amount:Q", stack="zero", title="Cost"),
            color=alt.Color("part:N", title="Cost"),
            tooltip=["name", "part", alt.Tooltip("amount:Q", format=",.0f")],
        )
        .properties(height=260)
    )
