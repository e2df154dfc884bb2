"""CSV text -> ParsedSheet.

Only the subset the published sheet export produces is understood: comma
delimiters and ``"`` toggling a quoted span. A quote is never emitted, so
doubled quotes (``""``) do not yield a literal quote character.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import pandas as pd


@dataclass(frozen=True)
class ParsedSheet:
    headers: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)


def parse_csv_line(line: str) -> List[str]:
    cells: List[str] = []
    current: List[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            cells.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    cells.append("".join(current).strip())
    return cells


def parse_csv(text: str) -> ParsedSheet:
    stripped = (text or "").strip()
    if not stripped:
        return ParsedSheet()

    lines = stripped.split("\n")
    headers = parse_csv_line(lines[0])
    rows: List[List[str]] = []
    for line in lines[1:]:
        values = parse_csv_line(line)
        # Skip rows where every cell is blank.
        if any(v.strip() for v in values):
            rows.append(values)
    return ParsedSheet(headers=headers, rows=rows)


def display_headers(headers: List[str], width: int = 0) -> List[str]:
    """Header labels for display: blank -> "Column N", duplicates suffixed."""
    out: List[str] = []
    seen: dict = {}
    for idx in range(max(width, len(headers))):
        label = headers[idx] if idx < len(headers) else ""
        label = label or f"Column {idx + 1}"
        if label in seen:
            seen[label] += 1
            label = f"{label} ({seen[label]})"
        else:
            seen[label] = 0
        out.append(label)
    return out


def sheet_to_frame(sheet: ParsedSheet) -> pd.DataFrame:
    width = max([len(sheet.headers)] + [len(r) for r in sheet.rows])
    if width == 0:
        return pd.DataFrame()
    columns = display_headers(sheet.headers, width)
    padded = [list(r) + [""] * (width - len(r)) for r in sheet.rows]
    return pd.DataFrame(padded, columns=columns, dtype="string")
