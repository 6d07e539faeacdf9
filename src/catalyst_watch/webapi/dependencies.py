"""Service dependencies for API routes."""

from ..config.settings import get_settings
from ..core.market_hours import USEquityMarketClock
from ..core.price_source import YFinancePriceSource
from ..ormdb.store import SqlReferenceStore
from ..services.analysis import AnalysisService
from ..services.revisit.service import RevisitService
from ..services.scan import ScanOrchestrator
from ..services.scan.jobs import get_orchestrator


def get_analysis_service() -> AnalysisService:
    """Dependency to get analysis service instance."""
    return AnalysisService()


def get_revisit_service() -> RevisitService:
    """Dependency to get revisit service instance."""
    clock = USEquityMarketClock(get_settings().market_timezone)
    return RevisitService(SqlReferenceStore(), YFinancePriceSource(clock))


def get_scan_orchestrator() -> ScanOrchestrator:
    """Dependency to get the shared scan orchestrator."""
    return get_orchestrator()
