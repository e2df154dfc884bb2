"""Dashboard state container.

`DashboardState` is immutable; every change goes through one of the reducer
functions below, which return a new state. `DashboardStore` is the single
shared holder used by the polling and search tasks.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Optional, Tuple

from core.catalog import SheetSource
from core.csv_parser import ParsedSheet


@dataclass(frozen=True)
class DashboardState:
    current_sheet: Optional[SheetSource] = None
    # Source the stored `sheet` was fetched for; lags `current_sheet` after a switch.
    loaded_sheet: Optional[SheetSource] = None
    sheet: ParsedSheet = field(default_factory=ParsedSheet)
    last_updated: Optional[datetime] = None
    is_loading: bool = False
    error: Optional[str] = None
    search_query: str = ""


def select_sheet(state: DashboardState, source: SheetSource) -> DashboardState:
    return replace(state, current_sheet=source, error=None)


def begin_fetch(state: DashboardState) -> Tuple[DashboardState, bool]:
    """Mark a fetch as in flight. Returns ``(state, False)`` when it must be skipped."""
    if state.is_loading or state.current_sheet is None:
        return state, False
    return replace(state, is_loading=True), True


def fetch_succeeded(state: DashboardState, source: SheetSource, sheet: ParsedSheet, now: datetime) -> DashboardState:
    # A selection made mid-download keeps the fetch slot claimed for the new source.
    still_loading = state.current_sheet != source
    return replace(state, loaded_sheet=source, sheet=sheet, last_updated=now, is_loading=still_loading, error=None)


def fetch_failed(state: DashboardState, message: str) -> DashboardState:
    # Previously loaded data stays in place.
    return replace(state, is_loading=False, error=message)


def set_search(state: DashboardState, query: str) -> DashboardState:
    return replace(state, search_query=query or "")


def is_stale(state: DashboardState) -> bool:
    """True when the stored sheet does not belong to the selected source."""
    return state.loaded_sheet != state.current_sheet


class DashboardStore:
    def __init__(self, state: Optional[DashboardState] = None) -> None:
        self._state = state or DashboardState()
        self._lock = threading.Lock()

    @property
    def state(self) -> DashboardState:
        with self._lock:
            return self._state

    def dispatch(self, reducer: Callable[..., DashboardState], *args) -> DashboardState:
        with self._lock:
            self._state = reducer(self._state, *args)
            return self._state

    def try_begin_fetch(self) -> Tuple[DashboardState, bool]:
        with self._lock:
            self._state, started = begin_fetch(self._state)
            return self._state, started
