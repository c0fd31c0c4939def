import logging
from collections import defaultdict

import pandas as pd

from models.replenishment_model import build_forecast
from models.types import BatchForecast, FacilityContext, ForecastConfig, ValidationError
from utils.stock_constants import PRIORITY_RANK

logger = logging.getLogger(__name__)


def group_records(records):
    """product_id -> records, preserving the incoming (oldest first) order."""
    grouped = defaultdict(list)
    for rec in records:
        grouped[rec.product_id].append(rec)
    return grouped


def forecast_facility(
        items,
        records,
        config: ForecastConfig | None = None,
        context: FacilityContext | None = None,
        executor=None,
) -> BatchForecast:
    """
    Forecast every product of a facility catalog.

    A product with invalid input is reported in `failures` and skipped; the
    rest of the batch still runs. Products are independent, so `executor`
    (anything with a `map` like concurrent.futures executors) may fan the
    work out; results keep the input order either way.
    """
    cfg = config or ForecastConfig()
    ctx = context or FacilityContext()
    by_product = group_records(records)

    def _one(item):
        try:
            return build_forecast(item, by_product.get(item.product_id, []), cfg, ctx), None
        except ValidationError as exc:
            logger.warning("Skipping product %s: %s", item.product_id, exc)
            return None, {"product_id": item.product_id, "errors": exc.to_dict()}

    mapper = executor.map if executor is not None else map
    batch = BatchForecast()
    for result, failure in mapper(_one, list(items)):
        if failure is not None:
            batch.failures.append(failure)
        else:
            batch.results.append(result)

    logger.info(
        "Facility %s: %d forecasts, %d failures",
        ctx.facility_id, len(batch.results), len(batch.failures),
    )
    return batch


def results_frame(batch: BatchForecast) -> pd.DataFrame:
    """Results as a DataFrame, most urgent first."""
    if not batch.results:
        return pd.DataFrame(columns=["product_id", "priority", "suggested_order_quantity", "confidence"])

    df = pd.DataFrame([r.to_dict() for r in batch.results])
    df["_rank"] = df["priority"].map(PRIORITY_RANK)
    df = df.sort_values(["_rank", "days_until_stockout"], na_position="last", kind="stable")
    return df.drop(columns="_rank").reset_index(drop=True)


def summarize_batch(batch: BatchForecast) -> dict:
    df = results_frame(batch)
    counts = df["priority"].value_counts().to_dict() if not df.empty else {}
    return {
        "products": int(len(df)),
        "failed": len(batch.failures),
        "high": int(counts.get("High", 0)),
        "medium": int(counts.get("Medium", 0)),
        "low": int(counts.get("Low", 0)),
        "total_order_quantity": int(df["suggested_order_quantity"].sum()) if not df.empty else 0,
        "average_confidence": round(float(df["confidence"].mean()), 2) if not df.empty else 0.0,
    }
