"""Runtime settings.

Values come from environment variables (a local ``.env`` file is loaded
first):

``MESS_LEDGER_PUBLISHED_ID``
    Publish id of the workbook (``/spreadsheets/d/e/<id>/pub``).
``MESS_LEDGER_REFRESH_SECONDS``
    Auto-refresh interval, default 30.
``MESS_LEDGER_SEARCH_DEBOUNCE_SECONDS``
    Delay before a table search is applied, default 0.3.
``MESS_LEDGER_REQUEST_TIMEOUT``
    HTTP timeout in seconds for the CSV export request, default 20.
``MESS_LEDGER_CORS_ORIGINS``
    Comma separated origins allowed by the API.
``MESS_LEDGER_LOG_LEVEL``
    Logging level name, default INFO.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from core.catalog import DEFAULT_PUBLISHED_ID

load_dotenv()

ENV_PREFIX = "MESS_LEDGER_"
DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


@dataclass(frozen=True)
class Settings:
    published_id: str = DEFAULT_PUBLISHED_ID
    refresh_seconds: float = 30.0
    search_debounce_seconds: float = 0.3
    request_timeout: float = 20.0
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"


def _as_positive_float(value: Optional[str], default: float) -> float:
    if value is None or not str(value).strip():
        return default
    try:
        out = float(value)
    except ValueError:
        return default
    return out if out > 0 else default


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    def get(name: str) -> Optional[str]:
        return env.get(ENV_PREFIX + name)

    origins_raw = get("CORS_ORIGINS")
    origins = [o.strip() for o in origins_raw.split(",") if o.strip()] if origins_raw else list(DEFAULT_CORS_ORIGINS)
    return Settings(
        published_id=(get("PUBLISHED_ID") or "").strip() or DEFAULT_PUBLISHED_ID,
        refresh_seconds=_as_positive_float(get("REFRESH_SECONDS"), 30.0),
        search_debounce_seconds=_as_positive_float(get("SEARCH_DEBOUNCE_SECONDS"), 0.3),
        request_timeout=_as_positive_float(get("REQUEST_TIMEOUT"), 20.0),
        cors_origins=origins,
        log_level=(get("LOG_LEVEL") or "INFO").strip().upper() or "INFO",
    )


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.log_level, logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
