from __future__ import annotations

from dataclasses import dataclass


def column_index(letters: str) -> int:
    """Convert a spreadsheet column label like "AG" into a 0-based index (AG -> 32)."""
    s = (letters or "").strip().upper()
    if not s or not s.isalpha():
        raise ValueError(f"Invalid column label: {letters!r}")
    out = 0
    for ch in s:
        out = out * 26 + (ord(ch) - ord("A") + 1)
    return out - 1


@dataclass(frozen=True)
class LedgerLayout:
    """Fixed cell coordinates of the monthly ledger sheet.

    Rows are 0-based indexes into the parsed data rows (header excluded), so
    spreadsheet row 8 is data row 6. Columns are 0-based (A=0).
    """

    member_count: int = 6
    name_column: int = 0

    # AG / AH / AI on the member rows
    meals_column: int = column_index("AG")
    maid_bill_column: int = column_index("AH")
    extra_column: int = column_index("AI")

    # Summary block in column AG (AG8, AG9, AG10)
    summary_column: int = column_index("AG")
    total_meals_row: int = 6
    total_bazar_row: int = 7
    meal_rate_row: int = 8
    total_meals_min_rows: int = 7
    total_bazar_min_rows: int = 8
    meal_rate_min_rows: int = 9

    # Deposit / due block (AG20:AI25)
    ledger_block_start: int = 18
    deposit_column: int = column_index("AG")
    due_column: int = column_index("AI")


DEFAULT_LAYOUT = LedgerLayout()
