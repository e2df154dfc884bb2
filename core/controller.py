from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Optional

from core.catalog import SheetCatalog, SheetSource, find_current_sheet, find_sheet
from core.config import Settings
from core.data import FetchFn, build_context, fetch_csv_text, refresh
from core.scheduler import Debouncer, Poller
from core.state import DashboardState, DashboardStore, select_sheet, set_search

logger = logging.getLogger(__name__)


class DashboardController:
    """Wires the store to the auto-refresh poller and the debounced search.

    Both tasks only touch the shared `DashboardStore`; rendering reads
    `context()` which is rebuilt from the stored sheet on every call.
    """

    def __init__(
        self,
        catalog: SheetCatalog,
        settings: Settings,
        fetch: Optional[FetchFn] = None,
        store: Optional[DashboardStore] = None,
    ) -> None:
        self.catalog = catalog
        self.settings = settings
        self.store = store or DashboardStore()
        self._fetch = fetch or (lambda url: fetch_csv_text(url, timeout=settings.request_timeout))
        self._poller = Poller(self.refresh, settings.refresh_seconds, name="sheet-refresh")
        self._search = Debouncer(self._apply_search, settings.search_debounce_seconds)

    @property
    def state(self) -> DashboardState:
        return self.store.state

    def start(self, today: Optional[date] = None) -> None:
        if self.state.current_sheet is None:
            current = find_current_sheet(self.catalog, today or date.today())
            if current is not None:
                self.select(current)
        self._poller.start()

    def stop(self) -> None:
        self._poller.stop(timeout=1.0)
        self._search.cancel()

    def select(self, source: SheetSource) -> bool:
        self.store.dispatch(select_sheet, source)
        return self.refresh()

    def select_by_id(self, remote_id: str) -> bool:
        source = find_sheet(self.catalog, remote_id)
        if source is None:
            logger.warning("unknown sheet id %s", remote_id)
            return False
        return self.select(source)

    def refresh(self) -> bool:
        return refresh(self.store, self.catalog, fetch=self._fetch)

    def search(self, query: str) -> None:
        self._search.trigger(query)

    def _apply_search(self, query: str) -> None:
        self.store.dispatch(set_search, query)

    def context(self) -> Dict[str, object]:
        return build_context(self.store.state)
