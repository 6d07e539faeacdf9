"""Revisit scan orchestration."""

from .models import ScanFailure, ScanReport, ScanState
from .orchestrator import ScanOrchestrator
from .protocols import AlertLedger, ReferenceStore

__all__ = [
    "AlertLedger",
    "ReferenceStore",
    "ScanFailure",
    "ScanOrchestrator",
    "ScanReport",
    "ScanState",
]
