"""Revisit alert endpoints."""

import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ...config.logging import get_logger
from ...ormdb.repositories import AlertHistoryRepository
from ...services.revisit.service import RevisitService
from ..dependencies import get_revisit_service
from ..exceptions import ValidationException
from ..models.responses import StatusResponse

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/check",
    response_model=StatusResponse,
    summary="Check Revisit Alerts",
    description="Run the revisit check for one user's watchlist",
)
async def check_alerts(
    request: Request,
    user_id: str = Query(..., min_length=1),
    ticker: Optional[str] = Query(None, min_length=1),
    current_price: Optional[float] = Query(None, gt=0),
    service: RevisitService = Depends(get_revisit_service),
):
    """
    Check a user's watchlist for price revisits.

    - **user_id**: Watchlist owner
    - **ticker**: Restrict the check to one watchlist ticker
    - **current_price**: Price to test instead of a live quote (requires ticker)
    """
    request_id = getattr(request.state, "request_id", None)

    if current_price is not None and not math.isfinite(current_price):
        raise ValidationException(
            "current_price must be a finite number",
            field_errors={"current_price": "not finite"},
            request_id=request_id,
        )

    results = await service.check_user(user_id, ticker, current_price)
    alerts = [alert.to_dict() for result in results for alert in result.alerts]

    logger.info(
        "Alert check completed",
        user_id=user_id,
        ticker=ticker,
        alerts=len(alerts),
        request_id=request_id,
    )
    return StatusResponse.create(
        data={
            "user_id": user_id,
            "alerts": alerts,
            "tickers": [result.to_dict() for result in results],
        },
        request_id=request_id,
    )


@router.get(
    "/history",
    response_model=StatusResponse,
    summary="Alert History",
    description="Most recent delivered revisit alerts for a user",
)
async def alert_history(
    request: Request,
    user_id: str = Query(..., min_length=1),
    limit: int = Query(50, ge=1, le=500),
):
    request_id = getattr(request.state, "request_id", None)

    with AlertHistoryRepository() as repo:
        rows = repo.get_alerts_for_user(user_id, limit)
        history = [
            {
                "catalyst_id": row.catalyst_id,
                "ticker": row.ticker,
                "price_before": row.price_before,
                "current_price": row.current_price,
                "triggered_at": row.triggered_at.isoformat(),
                "label": row.message_content,
            }
            for row in rows
        ]

    return StatusResponse.create(
        data={"user_id": user_id, "alerts": history, "count": len(history)},
        request_id=request_id,
    )
