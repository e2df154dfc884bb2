from __future__ import annotations

import logging
import math
import time
from datetime import datetime
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Optional

import pandas as pd
import requests

from core.catalog import SheetCatalog, export_url
from core.csv_parser import ParsedSheet, parse_csv, sheet_to_frame
from core.filters import filter_rows
from core.layout import DEFAULT_LAYOUT, LedgerLayout
from core.ledger import members_frame, summarize
from core.state import DashboardState, DashboardStore, fetch_failed, fetch_succeeded, is_stale

logger = logging.getLogger(__name__)

FETCH_ERROR_MESSAGE = "Failed to load data. Please check your internet connection."
DEFAULT_TIMEOUT = 20.0
CURRENCY_SIGN = "\u09f3"

FetchFn = Callable[[str], str]


def fetch_csv_text(url: str, session: Optional[requests.Session] = None, timeout: float = DEFAULT_TIMEOUT) -> str:
    getter = session.get if session is not None else requests.get
    r = getter(url, timeout=timeout)
    r.raise_for_status()
    return r.content.decode("utf-8")


def _now_ms() -> int:
    return int(time.time() * 1000)


def refresh(
    store: DashboardStore,
    catalog: SheetCatalog,
    fetch: FetchFn = fetch_csv_text,
    clock: Callable[[], datetime] = datetime.now,
    cache_bust: Callable[[], int] = _now_ms,
) -> bool:
    """Fetch and parse the selected sheet into the store.

    Returns False when nothing was started (no sheet selected, or a fetch is
    already in flight). On failure the previous sheet is kept and the store
    carries ``FETCH_ERROR_MESSAGE``. A sheet selected while the download was
    in flight is fetched next, before returning.
    """
    state, started = store.try_begin_fetch()
    if not started:
        logger.debug("refresh skipped (loading=%s, sheet=%s)", state.is_loading, state.current_sheet)
        return False

    while True:
        source = state.current_sheet
        url = export_url(catalog, source, cache_bust=cache_bust())
        logger.info("fetching sheet %s (gid=%s)", source.label, source.remote_id)
        try:
            text = fetch(url)
            sheet = parse_csv(text)
        except (requests.RequestException, ValueError):
            logger.exception("fetch failed for sheet %s", source.label)
            store.dispatch(fetch_failed, FETCH_ERROR_MESSAGE)
            return True
        except Exception:
            store.dispatch(fetch_failed, FETCH_ERROR_MESSAGE)
            raise

        state = store.dispatch(fetch_succeeded, source, sheet, clock())
        logger.info("loaded sheet %s: %d columns, %d rows", source.label, len(sheet.headers), len(sheet.rows))
        if not state.is_loading:
            return True
        logger.info("sheet %s selected during fetch, fetching it now", state.current_sheet.label)


def build_context(state: DashboardState, layout: LedgerLayout = DEFAULT_LAYOUT) -> Dict[str, object]:
    # A sheet fetched for a previous selection is never shown under the new one.
    stale = is_stale(state)
    sheet: ParsedSheet = ParsedSheet() if stale else state.sheet
    summary, members = summarize(sheet, layout)
    return {
        "current_sheet": state.current_sheet,
        "last_updated": None if stale else state.last_updated,
        "is_loading": state.is_loading,
        "error": state.error,
        "sheet": sheet,
        "summary": summary,
        "members": members,
        "members_frame": members_frame(members),
    }


def export_frame(page: str, ctx: Dict[str, object], query: str = "") -> pd.DataFrame:
    if page == "table":
        sheet = ctx.get("sheet") or ParsedSheet()
        frame = sheet_to_frame(ParsedSheet(headers=sheet.headers, rows=filter_rows(sheet.rows, query)))
    elif page == "members":
        frame = ctx.get("members_frame")
    else:
        frame = None
    if frame is None or not hasattr(frame, "to_csv"):
        return pd.DataFrame()
    return frame


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    """Round halves toward positive infinity: 2.5 -> 3, -2.5 -> -2."""
    if value is None or pd.isna(value):
        return None
    if not math.isfinite(float(value)):
        return float(value)
    q = Decimal(10) ** -ndigits
    d = Decimal(str(value))
    return float(d.quantize(q, rounding=ROUND_HALF_UP if d >= 0 else ROUND_HALF_DOWN))


def format_plain(value: object) -> str:
    """Numbers as the sheet shows them: 20 not 20.0, 12.5 stays 12.5."""
    if value is None or pd.isna(value):
        return "0"
    v = float(value)
    if v.is_integer():
        return str(int(v))
    return repr(v)


def format_taka(value: object, rounded: bool = False) -> str:
    if rounded:
        value = round_half_up(value)
    return f"{CURRENCY_SIGN}{format_plain(value)}"
