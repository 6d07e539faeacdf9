"""On-demand ticker analysis."""

from .service import AnalysisService, fallback_consolidation

__all__ = ["AnalysisService", "fallback_consolidation"]
