"""Runtime settings, read from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from sow_ledger.models import LedgerValidationError

LEDGER_FILE_ENV = "SOW_LEDGER_FILE"
LOG_LEVEL_ENV = "SOW_LEDGER_LOG_LEVEL"
ALLOWED_ORIGINS_ENV = "ALLOWED_ORIGINS"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    ledger_file: Optional[Path] = None
    log_level: str = "INFO"
    allowed_origins: list[str] = field(default_factory=list)

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)

    @property
    def allow_all_origins(self) -> bool:
        return "*" in self.allowed_origins


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from the environment (``os.environ`` by default)."""
    env = os.environ if environ is None else environ

    ledger_env = env.get(LEDGER_FILE_ENV, "").strip()
    ledger_file = Path(ledger_env) if ledger_env else None

    log_level = env.get(LOG_LEVEL_ENV, "INFO").strip().upper() or "INFO"
    if log_level not in _LOG_LEVELS:
        raise LedgerValidationError([
            f"{LOG_LEVEL_ENV}={log_level!r} is not one of {', '.join(_LOG_LEVELS)}"
        ])

    origins_env = env.get(ALLOWED_ORIGINS_ENV, "")
    origins = [o.strip() for o in origins_env.split(",") if o.strip()]

    return Settings(ledger_file=ledger_file, log_level=log_level, allowed_origins=origins)
