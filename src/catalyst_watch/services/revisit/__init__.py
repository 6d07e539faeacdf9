"""Catalyst price-revisit alerting."""

from .engine import check_revisits, evaluate_catalysts
from .models import AlertSettings, Catalyst, RevisitCheck, TriggeredAlert

__all__ = [
    "AlertSettings",
    "Catalyst",
    "RevisitCheck",
    "TriggeredAlert",
    "check_revisits",
    "evaluate_catalysts",
]
