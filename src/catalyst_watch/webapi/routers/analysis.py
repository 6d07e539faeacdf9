"""Consolidation and breakout analysis endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ...config.logging import get_logger
from ...services.analysis import AnalysisService
from ..dependencies import get_analysis_service
from ..exceptions import ValidationException
from ..models.responses import ConsolidationData, ConsolidationListResponse, StatusResponse

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/{ticker}/breakout",
    response_model=StatusResponse,
    summary="Analyze Breakout",
    description="Classify the latest bar against the most recent consolidation range",
)
async def analyze_breakout(
    ticker: str,
    request: Request,
    lookback_days: Optional[int] = Query(None, ge=1, le=3650),
    service: AnalysisService = Depends(get_analysis_service),
):
    """
    Breakout analysis for a ticker.

    - **ticker**: Stock symbol (e.g., AAPL)
    - **lookback_days**: Daily history to load (defaults to the configured lookback)
    """
    request_id = getattr(request.state, "request_id", None)
    logger.info("Breakout analysis requested", ticker=ticker, request_id=request_id)

    try:
        signal = await service.analyze_breakout(ticker, lookback_days)
    except ValueError as e:
        raise ValidationException(str(e), request_id=request_id)

    return StatusResponse.create(data=signal.to_dict(), request_id=request_id)


@router.get(
    "/{ticker}/consolidations",
    response_model=ConsolidationListResponse,
    summary="List Consolidations",
    description="Every consolidation window in the ticker's recent daily history",
)
async def analyze_consolidations(
    ticker: str,
    request: Request,
    lookback_days: Optional[int] = Query(None, ge=1, le=3650),
    min_duration_days: Optional[int] = Query(None, ge=1, le=365),
    service: AnalysisService = Depends(get_analysis_service),
):
    request_id = getattr(request.state, "request_id", None)

    try:
        periods = await service.analyze_consolidations(
            ticker, lookback_days, min_duration_days
        )
    except ValueError as e:
        raise ValidationException(str(e), request_id=request_id)

    return ConsolidationListResponse(
        success=True,
        ticker=ticker.upper(),
        data=[ConsolidationData(**period.to_dict()) for period in periods],
        request_id=request_id,
    )
