import uuid
from datetime import datetime

from sqlalchemy import (
    Column, String, Numeric, Date, TIMESTAMP, BigInteger, Integer, UniqueConstraint
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


# 1) Stock position per facility + product
class StockBalance(Base):
    __tablename__ = "stock_balances"
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    facility_id = Column(BigInteger, nullable=False)
    product_id = Column(String(64), nullable=False)
    product_name = Column(String(255), nullable=False)
    unit = Column(String(50), nullable=False, default="units")
    current_stock = Column(Numeric(14, 3), nullable=False, default=0)
    reorder_level = Column(Numeric(14, 3), nullable=False, default=0)
    max_level = Column(Numeric(14, 3), nullable=False, default=0)
    consumption_per_period = Column(Numeric(14, 3), nullable=False, default=0)
    lead_time_days = Column(Integer)
    safety_stock_days = Column(Integer)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow)
    __table_args__ = (
        UniqueConstraint("facility_id", "product_id", name="uq_stock_balance_facility_product"),
    )


# 2) Monthly consumption history
class ConsumptionHistory(Base):
    __tablename__ = "consumption_history"
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    facility_id = Column(BigInteger, nullable=False)
    product_id = Column(String(64), nullable=False)
    period_start = Column(Date, nullable=False)
    period_label = Column(String(20), nullable=False)
    consumed_quantity = Column(Numeric(14, 3), nullable=False)
    __table_args__ = (
        UniqueConstraint("facility_id", "product_id", "period_start", name="uq_consumption_facility_product_period"),
    )


# 3) Candidate products per health program
class ProgramProduct(Base):
    __tablename__ = "program_products"
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    program = Column(String(100), nullable=False)
    product_id = Column(String(64), nullable=False)
    product_name = Column(String(255), nullable=False)
    unit = Column(String(50), nullable=False, default="units")
    unit_price = Column(Numeric(12, 2), nullable=False, default=0)
    __table_args__ = (
        UniqueConstraint("program", "product_id", name="uq_program_product"),
    )


# 4) Replenishment forecasts
class ReplenishmentForecast(Base):
    __tablename__ = "replenishment_forecasts"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    facility_id = Column(BigInteger, nullable=False)
    product_id = Column(String(64), nullable=False)

    average_monthly_consumption = Column(Numeric(14, 3), nullable=False)
    suggested_order_quantity = Column(BigInteger, nullable=False)
    days_until_stockout = Column(Numeric(10, 1))  # NULL when there is no recent consumption
    months_of_stock = Column(Numeric(10, 2))
    current_stock = Column(Numeric(14, 3), nullable=False)
    priority = Column(String(10), nullable=False)
    stock_status = Column(String(10), nullable=False)
    confidence = Column(Numeric(4, 2), nullable=False)
    lead_time_days = Column(Integer, nullable=False)
    safety_stock_days = Column(Integer, nullable=False)

    generated_by = Column(String(255))
    model_version = Column(String(50), nullable=False)
    generated_at = Column(TIMESTAMP, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint(
            "facility_id", "product_id", "model_version",
            name="uq_replenishment_facility_product_version"
        ),
    )
