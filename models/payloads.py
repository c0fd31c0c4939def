from config import config
from models.types import ConsumptionRecord, ForecastConfig, StockItem, ValidationError

STOCK_ITEM_FIELDS = (
    "product_id", "product_name", "current_stock", "unit", "reorder_level", "max_level",
    "consumption_per_period", "lead_time_days", "safety_stock_days",
)
_OPTIONAL_DEFAULTS = {
    "product_name": "",
    "unit": "units",
    "consumption_per_period": 0,
}


def stock_item_from_dict(data: dict) -> StockItem:
    """
    JSON object -> StockItem. Values are taken as sent; the calculator
    rejects bad numbers. Lead time and safety stock default to the
    configured values when omitted.
    """
    values = {}
    missing = []
    for name in STOCK_ITEM_FIELDS:
        if name in data and data[name] is not None:
            values[name] = data[name]
        elif name in _OPTIONAL_DEFAULTS:
            values[name] = _OPTIONAL_DEFAULTS[name]
        elif name == "lead_time_days":
            values[name] = config.LEAD_TIME_DAYS
        elif name == "safety_stock_days":
            values[name] = config.SAFETY_STOCK_DAYS
        else:
            missing.append((name, "is required"))
    if missing:
        raise ValidationError(missing)
    values["product_id"] = str(values["product_id"])
    return StockItem(**values)


def record_from_dict(data: dict) -> ConsumptionRecord:
    if not isinstance(data, dict) or data.get("product_id") is None:
        raise ValidationError([("product_id", "is required")])
    return ConsumptionRecord(
        product_id=str(data["product_id"]),
        period_label=str(data.get("period_label", "")),
        consumed_quantity=data.get("consumed_quantity"),
    )


def config_from_dict(data: dict | None) -> ForecastConfig:
    data = data or {}
    kwargs = {"window_days": data.get("window_days", config.FORECAST_WINDOW_DAYS)}
    for name in ("lead_time_days_override", "safety_stock_days_override", "period_days", "exclude_zero_periods"):
        if data.get(name) is not None:
            kwargs[name] = data[name]
    return ForecastConfig(**kwargs)
