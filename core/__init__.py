"""Core (UI-agnostic) mess ledger logic.

This package contains:
- CSV parsing (published sheet export -> ParsedSheet)
- positional ledger extraction (summary + per-member records)
- the sheet catalog and current-month selection
- dashboard state reducers, fetch/refresh and scheduling
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
