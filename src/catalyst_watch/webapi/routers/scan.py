"""Endpoints for triggering and inspecting the revisit scan."""

from fastapi import APIRouter, Depends, Query, Request

from ...config.logging import get_logger
from ...services.scan import ScanOrchestrator
from ..dependencies import get_scan_orchestrator
from ..models.responses import StatusResponse

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/run",
    response_model=StatusResponse,
    summary="Run Revisit Scan",
    description="Run one scan tick now; force=true ignores market hours",
)
async def run_scan(
    request: Request,
    force: bool = Query(False),
    orchestrator: ScanOrchestrator = Depends(get_scan_orchestrator),
):
    request_id = getattr(request.state, "request_id", None)
    logger.info("Manual scan requested", force=force, request_id=request_id)

    report = await orchestrator.run_tick(force=force)
    return StatusResponse.create(data=report.to_dict(), request_id=request_id)


@router.get(
    "/status",
    response_model=StatusResponse,
    summary="Scan Status",
    description="Current orchestrator state and the last tick's report",
)
async def scan_status(
    request: Request,
    orchestrator: ScanOrchestrator = Depends(get_scan_orchestrator),
):
    last = orchestrator.last_report
    return StatusResponse.create(
        data={
            "state": orchestrator.state.value,
            "last_report": last.to_dict() if last else None,
        },
        request_id=getattr(request.state, "request_id", None),
    )
