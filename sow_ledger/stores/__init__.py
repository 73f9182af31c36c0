"""Baseline, event and legacy stores."""
from sow_ledger.stores.memory import (
    BaselineStore,
    ChangeRequestRegistry,
    EventLog,
    Ledger,
    LegacyEngineerStore,
    LineItemStore,
)
from sow_ledger.stores.loader import ledger_from_dict, load_ledger

__all__ = [
    "BaselineStore",
    "ChangeRequestRegistry",
    "EventLog",
    "Ledger",
    "LegacyEngineerStore",
    "LineItemStore",
    "ledger_from_dict",
    "load_ledger",
]
