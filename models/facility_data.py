import pandas as pd
from sqlalchemy import bindparam, text

from config import config
from db.connection import engine as default_engine
from models.replenishment_model import expected_periods
from models.types import ConsumptionRecord, StockItem
from utils.ai_config import DEFAULT_PERIOD_DAYS
from utils.date_utils import last_completed_months


def load_stock_items(facility_id: int, engine=None) -> list[StockItem]:
    """
    Stock position of every product held at a facility. Missing per-product
    lead time / safety stock fall back to the configured defaults.
    """
    q = text("""
             SELECT product_id,
                    product_name,
                    unit,
                    current_stock,
                    reorder_level,
                    max_level,
                    consumption_per_period,
                    lead_time_days,
                    safety_stock_days
             FROM stock_balances
             WHERE facility_id = :facility_id
             ORDER BY product_id
             """)
    df = pd.read_sql(q, engine or default_engine, params={"facility_id": facility_id})
    if df.empty:
        return []

    items = []
    for _, r in df.iterrows():
        items.append(StockItem(
            product_id=str(r["product_id"]),
            product_name=r["product_name"],
            current_stock=float(r["current_stock"]),
            unit=r["unit"] or "units",
            reorder_level=float(r["reorder_level"]),
            max_level=float(r["max_level"]),
            consumption_per_period=float(r["consumption_per_period"]),
            lead_time_days=int(r["lead_time_days"]) if not pd.isna(r["lead_time_days"]) else config.LEAD_TIME_DAYS,
            safety_stock_days=(
                int(r["safety_stock_days"]) if not pd.isna(r["safety_stock_days"]) else config.SAFETY_STOCK_DAYS
            ),
        ))
    return items


def load_consumption_records(
        facility_id: int,
        window_days: int,
        period_days: int = DEFAULT_PERIOD_DAYS,
        engine=None,
        today=None,
) -> list[ConsumptionRecord]:
    """
    Consumption for the completed months covering the window, oldest first.
    The current month is still being recorded and is left out.
    """
    months = last_completed_months(expected_periods(window_days, period_days), today)
    q = text("""
             SELECT product_id,
                    period_label,
                    consumed_quantity
             FROM consumption_history
             WHERE facility_id = :facility_id
               AND period_label IN :months
             ORDER BY product_id, period_start
             """).bindparams(bindparam("months", expanding=True))
    df = pd.read_sql(q, engine or default_engine, params={"facility_id": facility_id, "months": months})
    return [
        ConsumptionRecord(
            product_id=str(r["product_id"]),
            period_label=r["period_label"],
            consumed_quantity=float(r["consumed_quantity"]),
        )
        for _, r in df.iterrows()
    ]
