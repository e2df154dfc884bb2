from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Dict, List, Tuple

import pandas as pd

from core.csv_parser import ParsedSheet
from core.layout import DEFAULT_LAYOUT, LedgerLayout


# Longest leading decimal literal, the way the sheet export values are read.
# ASCII digits only: "৫০" is not a number.
_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)

MEMBER_COLUMNS = [
    "name",
    "total_meals",
    "bazar_cost",
    "maid_bill",
    "extra_expenses",
    "total_cost",
    "deposit",
    "due",
]


@dataclass(frozen=True)
class MemberRecord:
    name: str
    total_meals: float = 0.0
    bazar_cost: float = 0.0
    maid_bill: float = 0.0
    extra_expenses: float = 0.0
    total_cost: float = 0.0
    deposit: float = 0.0
    due: float = 0.0


@dataclass(frozen=True)
class LedgerSummary:
    total_meals: float = 0.0
    member_count: int = 0
    total_bazar: float = 0.0
    meal_rate: float = 0.0


def coerce_number(value: object) -> float:
    """Read a cell as a number; anything unparsable (or missing) is 0."""
    if value is None:
        return 0.0
    match = _NUMBER_PREFIX.match(str(value).lstrip())
    if not match:
        return 0.0
    return float(match.group(0))


def cell(sheet: ParsedSheet, row: int, col: int) -> str:
    if row < 0 or col < 0 or row >= len(sheet.rows):
        return ""
    values = sheet.rows[row]
    if col >= len(values):
        return ""
    return values[col]


def _summary_value(sheet: ParsedSheet, row: int, min_rows: int, col: int) -> float:
    if len(sheet.rows) < min_rows:
        return 0.0
    return coerce_number(cell(sheet, row, col))


def extract_summary(sheet: ParsedSheet, layout: LedgerLayout = DEFAULT_LAYOUT) -> LedgerSummary:
    members = sum(
        1
        for idx in range(min(layout.member_count, len(sheet.rows)))
        if cell(sheet, idx, layout.name_column).strip()
    )
    return LedgerSummary(
        total_meals=_summary_value(sheet, layout.total_meals_row, layout.total_meals_min_rows, layout.summary_column),
        member_count=members,
        total_bazar=_summary_value(sheet, layout.total_bazar_row, layout.total_bazar_min_rows, layout.summary_column),
        meal_rate=_summary_value(sheet, layout.meal_rate_row, layout.meal_rate_min_rows, layout.summary_column),
    )


def extract_member(sheet: ParsedSheet, index: int, meal_rate: float, layout: LedgerLayout = DEFAULT_LAYOUT) -> MemberRecord:
    name = cell(sheet, index, layout.name_column) or f"Member {index + 1}"
    total_meals = coerce_number(cell(sheet, index, layout.meals_column))
    maid_bill = coerce_number(cell(sheet, index, layout.maid_bill_column))
    extra_expenses = coerce_number(cell(sheet, index, layout.extra_column))

    ledger_row = layout.ledger_block_start + index
    deposit = 0.0
    due = 0.0
    if len(sheet.rows) > ledger_row:
        deposit = coerce_number(cell(sheet, ledger_row, layout.deposit_column))
        due = coerce_number(cell(sheet, ledger_row, layout.due_column))

    bazar_cost = total_meals * meal_rate
    return MemberRecord(
        name=name,
        total_meals=total_meals,
        bazar_cost=bazar_cost,
        maid_bill=maid_bill,
        extra_expenses=extra_expenses,
        total_cost=bazar_cost + maid_bill + extra_expenses,
        deposit=deposit,
        due=due,
    )


def summarize(sheet: ParsedSheet, layout: LedgerLayout = DEFAULT_LAYOUT) -> Tuple[LedgerSummary, List[MemberRecord]]:
    """Decode the fixed ledger layout into a summary and one record per member slot."""
    summary = extract_summary(sheet, layout)
    members = [extract_member(sheet, idx, summary.meal_rate, layout) for idx in range(layout.member_count)]
    return summary, members


def members_frame(members: List[MemberRecord]) -> pd.DataFrame:
    if not members:
        return pd.DataFrame(columns=MEMBER_COLUMNS)
    return pd.DataFrame([asdict(m) for m in members], columns=MEMBER_COLUMNS)


def ledger_totals(members: List[MemberRecord]) -> Dict[str, float]:
    frame = members_frame(members)
    cols = [c for c in MEMBER_COLUMNS if c != "name"]
    if frame.empty:
        return {c: 0.0 for c in cols}
    sums = frame[cols].astype(float).sum()
    return {c: float(sums[c]) for c in cols}

