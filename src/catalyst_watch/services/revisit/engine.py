"""Revisit detection: is the current price back where a past catalyst started?"""

import math
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from ...config.logging import get_logger
from .models import AlertSettings, Catalyst, RevisitCheck, TriggeredAlert

logger = get_logger(__name__)


def evaluate_catalysts(
    ticker: str,
    current_price: float,
    catalysts: Iterable[Catalyst],
    settings: AlertSettings,
) -> List[RevisitCheck]:
    """
    Evaluate every catalyst for ``ticker`` against the alert settings.

    A catalyst is eligible when its move is at least ``minimum_move``, and
    revisiting when it is eligible and the current price lies within
    ``tolerance_points`` of its pre-event price (bounds inclusive).
    """
    symbol = ticker.upper()
    price_known = current_price is not None and math.isfinite(current_price)

    checks = []
    for catalyst in catalysts:
        if catalyst.ticker != symbol:
            continue

        eligible = catalyst.magnitude >= settings.minimum_move
        distance = abs(current_price - catalyst.price_before) if price_known else math.inf
        checks.append(
            RevisitCheck(
                catalyst=catalyst,
                distance=distance,
                eligible=eligible,
                revisiting=eligible and distance <= settings.tolerance_points,
            )
        )
    return checks


def check_revisits(
    ticker: str,
    current_price: float,
    catalysts: Iterable[Catalyst],
    settings: AlertSettings,
    *,
    user_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[TriggeredAlert]:
    """
    Return one alert per catalyst whose pre-event price is being revisited.

    Pure function: no I/O, and identical inputs (including ``now``) give
    identical output. A non-finite ``current_price`` yields no alerts.
    """
    if current_price is None or not math.isfinite(current_price):
        logger.debug("Skipping revisit check without a price", ticker=ticker)
        return []

    triggered_at = now or datetime.now(timezone.utc)
    alerts = [
        TriggeredAlert(
            ticker=check.catalyst.ticker,
            catalyst_id=check.catalyst.id,
            catalyst_label=check.catalyst.label,
            price_before=check.catalyst.price_before,
            price_after=check.catalyst.price_after,
            current_price=current_price,
            tolerance_points=settings.tolerance_points,
            minimum_move=settings.minimum_move,
            triggered_at=triggered_at,
            user_id=user_id,
        )
        for check in evaluate_catalysts(ticker, current_price, catalysts, settings)
        if check.revisiting
    ]

    if alerts:
        logger.debug(
            "Revisits detected",
            ticker=ticker,
            user_id=user_id,
            current_price=current_price,
            count=len(alerts),
        )
    return alerts
