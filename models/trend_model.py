import numpy as np

from models.types import InsufficientDataError, ValidationError
from utils.ai_config import (
    DEFAULT_FORECAST_MONTHS, MIN_TREND_PERIODS, MIN_VARIABILITY_CONFIDENCE, TREND_FACTOR_MAX, TREND_FACTOR_MIN,
)


def project_consumption(records, forecast_months: int = DEFAULT_FORECAST_MONTHS) -> dict:
    """
    Project consumption over `forecast_months` from monthly history
    (oldest first), adjusting the mean by the change between the older and
    newer halves of the history.

    Raises InsufficientDataError with fewer than MIN_TREND_PERIODS periods.
    """
    if not isinstance(forecast_months, int) or isinstance(forecast_months, bool) or forecast_months <= 0:
        raise ValidationError([("forecast_months", "must be a positive whole number of months")])

    qty = np.array([float(r.consumed_quantity) for r in records], dtype=float)
    if np.any(qty < 0) or not np.all(np.isfinite(qty)):
        raise ValidationError([("records", "consumed_quantity must be finite and >= 0")])
    if len(qty) < MIN_TREND_PERIODS:
        raise InsufficientDataError(
            f"{len(qty)} periods of history; at least {MIN_TREND_PERIODS} are needed"
        )

    avg = float(qty.mean())
    half = len(qty) // 2
    first_avg = float(qty[:half].mean())
    second_avg = float(qty[half:].mean())

    # flat when the older half has no usage to compare against
    raw_factor = second_avg / first_avg if first_avg > 0 else 1.0
    factor = float(np.clip(raw_factor, TREND_FACTOR_MIN, TREND_FACTOR_MAX))

    if avg > 0:
        cv = float(qty.std(ddof=0)) / avg
        confidence = float(np.clip(1.0 - cv, MIN_VARIABILITY_CONFIDENCE, 1.0))
    else:
        confidence = 0.0

    return {
        "average_consumption": round(avg, 3),
        "trend_factor": round(factor, 3),
        "trend_pct": round((raw_factor - 1.0) * 100, 1),
        "forecast_months": forecast_months,
        "forecast_quantity": int(round(avg * factor * forecast_months)),
        "confidence": round(confidence, 2),
        "periods": int(len(qty)),
    }
