from abc import ABC, abstractmethod
from dataclasses import dataclass

import pandas as pd
from sqlalchemy import text

from models.trend_model import project_consumption
from models.types import InsufficientDataError
from utils.ai_config import DEFAULT_FORECAST_MONTHS


@dataclass(frozen=True)
class CatalogProduct:
    product_id: str
    product_name: str
    unit: str
    unit_price: float


class ProgramCatalog(ABC):
    """Given a health program identifier, return its candidate products."""

    @abstractmethod
    def products_for_program(self, program: str) -> list[CatalogProduct]:
        ...


class StaticProgramCatalog(ProgramCatalog):
    def __init__(self, programs: dict, default: list | None = None):
        self._programs = {k: list(v) for k, v in programs.items()}
        self._default = list(default or [])

    def products_for_program(self, program: str) -> list[CatalogProduct]:
        return list(self._programs.get(program, self._default))


class SqlProgramCatalog(ProgramCatalog):
    def __init__(self, engine):
        self.engine = engine

    def products_for_program(self, program: str) -> list[CatalogProduct]:
        q = text("""
                 SELECT product_id, product_name, unit, unit_price
                 FROM program_products
                 WHERE program = :program
                 ORDER BY product_id
                 """)
        df = pd.read_sql(q, self.engine, params={"program": program})
        return [
            CatalogProduct(
                product_id=str(r["product_id"]),
                product_name=r["product_name"],
                unit=r["unit"],
                unit_price=float(r["unit_price"]),
            )
            for _, r in df.iterrows()
        ]


def forecast_program(
        program: str,
        catalog: ProgramCatalog,
        records_by_product: dict,
        forecast_months: int = DEFAULT_FORECAST_MONTHS,
) -> dict:
    """
    Projected quantity and value for every product of a program. Products
    without enough history are listed with zero quantity and confidence.
    """
    products = []
    for p in catalog.products_for_program(program):
        try:
            proj = project_consumption(records_by_product.get(p.product_id, []), forecast_months)
            qty, confidence, trend = proj["forecast_quantity"], proj["confidence"], proj["trend_pct"]
            insufficient = False
        except InsufficientDataError:
            qty, confidence, trend = 0, 0.0, None
            insufficient = True

        products.append({
            "product_id": p.product_id,
            "product_name": p.product_name,
            "unit": p.unit,
            "unit_price": p.unit_price,
            "forecast_quantity": qty,
            "forecast_value": round(qty * p.unit_price, 2),
            "confidence": confidence,
            "trend_pct": trend,
            "insufficient_history": insufficient,
        })

    return {
        "program": program,
        "forecast_months": forecast_months,
        **summarize_program(products),
        "products": products,
    }


def summarize_program(products: list) -> dict:
    if not products:
        return {"total_products": 0, "total_quantity": 0, "total_value": 0.0, "average_confidence": 0.0}
    df = pd.DataFrame(products)
    return {
        "total_products": int(len(df)),
        "total_quantity": int(df["forecast_quantity"].sum()),
        "total_value": round(float(df["forecast_value"].sum()), 2),
        "average_confidence": round(float(df["confidence"].mean()), 2),
    }
