import dataclasses
import logging
import math

from models.types import (
    FacilityContext, ForecastConfig, ForecastResult, Priority, StockItem,
    UNBOUNDED, ValidationError,
)
from utils.ai_config import (
    DAYS_PER_MONTH, DEFAULT_PERIOD_DAYS, DEFAULT_WINDOW_DAYS, HIGH_PRIORITY_DAYS, MEDIUM_PRIORITY_DAYS,
)
from utils.stock_constants import STOCK_GOOD, STOCK_LOW, STOCK_OUT

logger = logging.getLogger(__name__)


# ---------------------------------------------------------
# Input validation (inputs are rejected, never clamped)
# ---------------------------------------------------------
def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _check_quantity(errors, name, value):
    if not _is_number(value):
        errors.append((name, "must be a finite number"))
    elif value < 0:
        errors.append((name, "must be >= 0"))


def _check_days(errors, name, value):
    if not isinstance(value, int) or isinstance(value, bool):
        errors.append((name, "must be a whole number of days"))
    elif value < 0:
        errors.append((name, "must be >= 0"))


def validate_stock_item(item: StockItem) -> list:
    errors = []
    _check_quantity(errors, "current_stock", item.current_stock)
    _check_quantity(errors, "reorder_level", item.reorder_level)
    _check_quantity(errors, "max_level", item.max_level)
    _check_quantity(errors, "consumption_per_period", item.consumption_per_period)
    _check_days(errors, "lead_time_days", item.lead_time_days)
    _check_days(errors, "safety_stock_days", item.safety_stock_days)
    if (_is_number(item.max_level) and _is_number(item.reorder_level)
            and item.max_level < item.reorder_level):
        errors.append(("max_level", "must be >= reorder_level"))
    return errors


def validate_records(records, product_id=None) -> list:
    errors = []
    for i, rec in enumerate(records):
        _check_quantity(errors, f"records[{i}].consumed_quantity", rec.consumed_quantity)
        if product_id is not None and rec.product_id != product_id:
            errors.append((f"records[{i}].product_id", f"belongs to {rec.product_id!r}, expected {product_id!r}"))
    return errors


def validate_config(cfg: ForecastConfig) -> list:
    errors = []
    if not isinstance(cfg.window_days, int) or isinstance(cfg.window_days, bool) or cfg.window_days <= 0:
        errors.append(("window_days", "must be a positive whole number of days"))
    if not isinstance(cfg.period_days, int) or isinstance(cfg.period_days, bool) or cfg.period_days <= 0:
        errors.append(("period_days", "must be a positive whole number of days"))
    if cfg.lead_time_days_override is not None:
        _check_days(errors, "lead_time_days_override", cfg.lead_time_days_override)
    if cfg.safety_stock_days_override is not None:
        _check_days(errors, "safety_stock_days_override", cfg.safety_stock_days_override)
    return errors


def _raise_if(errors):
    if errors:
        raise ValidationError(errors)


# ---------------------------------------------------------
# Core formulas
# ---------------------------------------------------------
def expected_periods(window_days: int = DEFAULT_WINDOW_DAYS, period_days: int = DEFAULT_PERIOD_DAYS) -> int:
    return max(1, math.ceil(window_days / period_days))


def window_records(records, window_days: int = DEFAULT_WINDOW_DAYS, period_days: int = DEFAULT_PERIOD_DAYS):
    """Most recent periods that fall inside the window (records are oldest first)."""
    return list(records)[-expected_periods(window_days, period_days):]


def average_monthly_consumption(
        records,
        window_days: int = DEFAULT_WINDOW_DAYS,
        period_days: int = DEFAULT_PERIOD_DAYS,
        exclude_zero_periods: bool = False,
) -> float:
    """
    Mean consumption per 30-day month over the most recent `window_days` of
    history. Returns 0.0 for empty history so batch callers never abort;
    `build_forecast` reports that case as zero confidence.

    With `exclude_zero_periods`, months with no consumption (typically
    stock-outs) are left out of the denominator unless every month is zero.
    """
    records = list(records)
    _raise_if(validate_records(records) + validate_config(
        ForecastConfig(window_days=window_days, period_days=period_days)))

    values = [float(r.consumed_quantity) for r in window_records(records, window_days, period_days)]
    if not values:
        return 0.0

    if exclude_zero_periods:
        non_zero = [v for v in values if v > 0]
        values = non_zero or values

    per_period = sum(values) / len(values)
    return per_period * DAYS_PER_MONTH / period_days


def days_of_stock_remaining(current_stock: float, average_daily_consumption: float):
    """
    Days until the current stock runs out at the given daily rate.
    Returns UNBOUNDED when there is no consumption to estimate from.
    """
    errors = []
    _check_quantity(errors, "current_stock", current_stock)
    _check_quantity(errors, "average_daily_consumption", average_daily_consumption)
    _raise_if(errors)

    if average_daily_consumption == 0:
        return UNBOUNDED
    return current_stock / average_daily_consumption


def suggested_order_quantity(item: StockItem, amc: float) -> int:
    """
    Lead-time demand plus safety stock, less stock on hand:

        ceil(amc/30 * lead_time_days + amc/30 * safety_stock_days - current_stock)

    floored at zero.
    """
    errors = validate_stock_item(item)
    _check_quantity(errors, "amc", amc)
    _raise_if(errors)

    daily = amc / DAYS_PER_MONTH
    need = (daily * item.lead_time_days) + (daily * item.safety_stock_days) - item.current_stock
    # round first so float noise (e.g. 85.00000000000001) does not add a unit;
    # a true shortfall under 1e-6 units therefore orders nothing
    return max(0, math.ceil(round(need, 6)))


def classify_priority(current_stock: float, reorder_level: float, days_until_stockout) -> Priority:
    # at or below reorder level is urgent whatever the estimate says
    if current_stock <= reorder_level:
        return Priority.HIGH
    if days_until_stockout is UNBOUNDED:
        return Priority.LOW
    if days_until_stockout < HIGH_PRIORITY_DAYS:
        return Priority.HIGH
    if days_until_stockout < MEDIUM_PRIORITY_DAYS:
        return Priority.MEDIUM
    return Priority.LOW


def months_of_stock(current_stock: float, amc: float):
    if amc <= 0:
        return None
    return current_stock / amc


def stock_status(current_stock: float, reorder_level: float) -> str:
    if current_stock <= 0:
        return STOCK_OUT
    if current_stock <= reorder_level:
        return STOCK_LOW
    return STOCK_GOOD


def _apply_overrides(item: StockItem, cfg: ForecastConfig) -> StockItem:
    changes = {}
    if cfg.lead_time_days_override is not None:
        changes["lead_time_days"] = cfg.lead_time_days_override
    if cfg.safety_stock_days_override is not None:
        changes["safety_stock_days"] = cfg.safety_stock_days_override

    for name, value in changes.items():
        current = getattr(item, name)
        if current != value:
            logger.warning(
                "Product %s: %s override %s replaces item value %s",
                item.product_id, name, value, current,
            )
    return dataclasses.replace(item, **changes) if changes else item


# ---------------------------------------------------------
# Orchestration
# ---------------------------------------------------------
def build_forecast(
        item: StockItem,
        records,
        config: ForecastConfig | None = None,
        context: FacilityContext | None = None,
) -> ForecastResult:
    """
    Full replenishment forecast for one product. Pure: identical inputs
    always give identical output.

    Raises ValidationError (listing every bad field) for malformed input.
    Missing history is not an error: AMC is 0 and confidence is 0.
    """
    cfg = config or ForecastConfig()
    ctx = context or FacilityContext()
    records = list(records)

    _raise_if(validate_stock_item(item) + validate_records(records, item.product_id) + validate_config(cfg))

    effective = _apply_overrides(item, cfg)

    amc = average_monthly_consumption(
        records,
        window_days=cfg.window_days,
        period_days=cfg.period_days,
        exclude_zero_periods=cfg.exclude_zero_periods,
    )
    days = days_of_stock_remaining(effective.current_stock, amc / DAYS_PER_MONTH)
    priority = classify_priority(effective.current_stock, effective.reorder_level, days)
    order_qty = suggested_order_quantity(effective, amc)

    periods_used = len(window_records(records, cfg.window_days, cfg.period_days))
    if periods_used == 0 or amc == 0:
        confidence = 0.0
    else:
        confidence = min(1.0, periods_used / expected_periods(cfg.window_days, cfg.period_days))

    mos = months_of_stock(effective.current_stock, amc)

    return ForecastResult(
        product_id=effective.product_id,
        average_monthly_consumption=round(amc, 3),
        suggested_order_quantity=order_qty,
        days_until_stockout=None if days is UNBOUNDED else round(days, 1),
        priority=priority,
        confidence=round(confidence, 2),
        product_name=effective.product_name,
        unit=effective.unit,
        current_stock=float(effective.current_stock),
        months_of_stock=None if mos is None else round(mos, 2),
        stock_status=stock_status(effective.current_stock, effective.reorder_level),
        lead_time_days=effective.lead_time_days,
        safety_stock_days=effective.safety_stock_days,
        facility_id=ctx.facility_id,
        generated_by=ctx.user_id,
    )
