"""API routers for Catalyst Watch."""

from .alerts import router as alerts_router
from .analysis import router as analysis_router
from .scan import router as scan_router

__all__ = ["alerts_router", "analysis_router", "scan_router"]
