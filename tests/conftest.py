import os

# Must be set before config / db.connection are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_INIT_ON_STARTUP"] = "false"

from datetime import date  # noqa: E402

import pytest  # noqa: E402

from models.types import ConsumptionRecord, StockItem  # noqa: E402


def make_item(product_id="P1", current_stock=450, reorder_level=100, max_level=1000,
              lead_time_days=30, safety_stock_days=15, **extra) -> StockItem:
    return StockItem(
        product_id=product_id,
        product_name=extra.get("product_name", f"Product {product_id}"),
        current_stock=current_stock,
        unit=extra.get("unit", "tablets"),
        reorder_level=reorder_level,
        max_level=max_level,
        consumption_per_period=extra.get("consumption_per_period", 0),
        lead_time_days=lead_time_days,
        safety_stock_days=safety_stock_days,
    )


def make_records(product_id, quantities, start_year=2025):
    return [
        ConsumptionRecord(product_id=product_id, period_label=f"{start_year}-{i + 1:02d}", consumed_quantity=q)
        for i, q in enumerate(quantities)
    ]


@pytest.fixture
def item():
    return make_item()


@pytest.fixture
def db_engine():
    from db.connection import engine
    from db.models import Base

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(db_engine):
    from db.connection import SessionLocal

    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client(db_engine):
    from app import app

    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


def month_starts_back(n, today=None):
    """First day of each of the `n` months before today's month, oldest first."""
    cur = (today or date.today()).replace(day=1)
    starts = []
    for _ in range(n):
        prev_year = cur.year if cur.month > 1 else cur.year - 1
        prev_month = cur.month - 1 if cur.month > 1 else 12
        cur = date(prev_year, prev_month, 1)
        starts.append(cur)
    return list(reversed(starts))
