from datetime import date

from conftest import month_starts_back
from db.models import ConsumptionHistory, ProgramProduct, StockBalance


def _seed_facility(session, facility_id=5):
    session.add_all([
        StockBalance(facility_id=facility_id, product_id="P1", product_name="Artemether 20mg", unit="tablets",
                     current_stock=450, reorder_level=100, max_level=1000, consumption_per_period=85,
                     lead_time_days=30, safety_stock_days=15),
        StockBalance(facility_id=facility_id, product_id="P2", product_name="Paracetamol 500mg", unit="tablets",
                     current_stock=0, reorder_level=50, max_level=600, consumption_per_period=150,
                     lead_time_days=30, safety_stock_days=15),
    ])
    for start in month_starts_back(3):
        label = start.strftime("%Y-%m")
        session.add(ConsumptionHistory(facility_id=facility_id, product_id="P1", period_start=start,
                                       period_label=label, consumed_quantity=85))
        session.add(ConsumptionHistory(facility_id=facility_id, product_id="P2", period_start=start,
                                       period_label=label, consumed_quantity=150))
    # current month is still open and must not drag the average down
    this_month = date.today().replace(day=1)
    session.add(ConsumptionHistory(facility_id=facility_id, product_id="P1", period_start=this_month,
                                   period_label=this_month.strftime("%Y-%m"), consumed_quantity=6))
    session.commit()


def test_health(client):
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_calculate_reports_partial_failures(client):
    body = {
        "facility_id": 9,
        "user_id": "store-keeper",
        "items": [
            {"product_id": "P1", "product_name": "Artemether", "current_stock": 450, "reorder_level": 100,
             "max_level": 1000, "lead_time_days": 30, "safety_stock_days": 15},
            {"product_id": "P2", "reorder_level": 10, "max_level": 100},
            {"product_id": "P3", "current_stock": -4, "reorder_level": 10, "max_level": 100},
        ],
        "consumption": [
            {"product_id": "P1", "period_label": "2025-07", "consumed_quantity": 85},
            {"product_id": "P1", "period_label": "2025-08", "consumed_quantity": 85},
            {"product_id": "P1", "period_label": "2025-09", "consumed_quantity": 85},
        ],
    }

    resp = client.post("/api/v1/replenishment/calculate", json=body)
    data = resp.get_json()

    assert resp.status_code == 200
    assert data["count"] == 1
    result = data["results"][0]
    assert result["product_id"] == "P1"
    assert result["suggested_order_quantity"] == 0
    assert result["days_until_stockout"] == 158.8
    assert result["priority"] == "Low"
    assert result["facility_id"] == 9
    assert result["generated_by"] == "store-keeper"
    assert [f["product_id"] for f in data["failures"]] == ["P2", "P3"]
    assert data["failures"][0]["errors"] == [{"field": "current_stock", "message": "is required"}]
    assert data["summary"]["failed"] == 2


def test_calculate_without_history_returns_unbounded_days(client):
    body = {"items": [{"product_id": "P1", "current_stock": 10, "reorder_level": 0, "max_level": 10}]}

    data = client.post("/api/v1/replenishment/calculate", json=body).get_json()

    assert data["results"][0]["days_until_stockout"] is None
    assert data["results"][0]["confidence"] == 0


def test_calculate_requires_items(client):
    resp = client.post("/api/v1/replenishment/calculate", json={"consumption": []})

    assert resp.status_code == 400
    assert resp.get_json()["status"] == "error"


def test_calculate_rejects_bad_config(client):
    resp = client.post("/api/v1/replenishment/calculate", json={"items": [], "config": {"window_days": 0}})

    assert resp.status_code == 400
    assert resp.get_json()["errors"][0]["field"] == "window_days"


def test_compute_stores_and_lists_forecasts(client, db_session):
    _seed_facility(db_session)

    resp = client.post("/api/v1/replenishment", json={"facility_id": 5, "user_id": "u1"})
    data = resp.get_json()

    assert resp.status_code == 200
    assert data["status"] == "success"
    assert data["count"] == 2
    assert data["summary"]["high"] == 1

    rows = client.get("/api/v1/replenishment/5").get_json()
    assert [r["product_id"] for r in rows] == ["P2", "P1"]
    assert rows[0]["priority"] == "High"
    assert rows[0]["suggested_order_quantity"] == 225
    assert rows[0]["generated_by"] == "u1"
    assert rows[1]["average_monthly_consumption"] == 85.0


def test_compute_twice_updates_in_place(client, db_session):
    _seed_facility(db_session)
    client.post("/api/v1/replenishment", json={"facility_id": 5})

    resp = client.post("/api/v1/replenishment",
                       json={"facility_id": 5, "lead_time_days_override": 60})
    assert resp.status_code == 200

    rows = client.get("/api/v1/replenishment/5").get_json()
    assert len(rows) == 2
    # 5/day * (60 + 15)
    assert rows[0]["suggested_order_quantity"] == 375


def test_compute_for_facility_without_stock(client):
    resp = client.post("/api/v1/replenishment", json={"facility_id": 404})

    assert resp.status_code == 200
    assert resp.get_json()["count"] == 0


def test_compute_requires_facility(client):
    assert client.post("/api/v1/replenishment", json={}).status_code == 400


def test_recommend_method(client):
    resp = client.post("/api/v1/forecast/method", json={"consumption": "no", "service": "yes"})
    data = resp.get_json()

    assert resp.status_code == 200
    assert data["recommended"]["method"] == "service"
    assert data["recommended"]["name"] == "Service Statistics Method"


def test_program_forecast(client, db_session):
    db_session.add(ProgramProduct(program="Malaria", product_id="AL", product_name="Artemether-Lumefantrine",
                                  unit="tablets", unit_price=0.85))
    db_session.commit()
    body = {
        "program": "Malaria",
        "forecast_months": 12,
        "consumption": [
            {"product_id": "AL", "period_label": f"2025-0{m}", "consumed_quantity": 1000} for m in range(1, 5)
        ],
    }

    data = client.post("/api/v1/forecast/program", json=body).get_json()

    assert data["status"] == "success"
    assert data["total_quantity"] == 12000
    assert data["products"][0]["forecast_value"] == 10200.0


def test_program_forecast_unknown_program(client):
    resp = client.post("/api/v1/forecast/program", json={"program": "Nutrition"})

    assert resp.status_code == 200
    assert resp.get_json()["count"] == 0


def test_program_forecast_requires_program(client):
    assert client.post("/api/v1/forecast/program", json={}).status_code == 400


def test_rrf_suggest(client):
    body = {"lines": [{"item_id": "P1", "soh": 40, "amc": 20, "pipeline": 10}, {"item_id": "P2", "soh": -1}]}

    data = client.post("/api/v1/rrf/suggest", json=body).get_json()

    assert data["count"] == 2
    assert data["lines"][0]["suggested_order"] == 30
    assert data["issues"] == ["Line 2: Negative SOH", "Line 2: Missing SOH/AMC"]


def test_rrf_requires_lines(client):
    assert client.post("/api/v1/rrf/suggest", json={"lines": "nope"}).status_code == 400


def test_rrf_rejects_non_numeric_quantities(client):
    body = {"lines": [{"item_id": "P1", "soh": "forty", "amc": 20}], "target_months": "three"}

    resp = client.post("/api/v1/rrf/suggest", json=body)

    assert resp.status_code == 400
    assert {e["field"] for e in resp.get_json()["errors"]} == {"target_months", "lines[0].soh"}


def test_calculate_rejects_non_object_config(client):
    resp = client.post("/api/v1/replenishment/calculate", json={"items": [], "config": "fast"})

    assert resp.status_code == 400
    assert resp.get_json()["errors"][0]["field"] == "config"


def test_program_forecast_rejects_bad_history_days(client):
    resp = client.post("/api/v1/forecast/program", json={"program": "Malaria", "facility_id": 1, "history_days": "a year"})

    assert resp.status_code == 400
    assert resp.get_json()["errors"][0]["field"] == "history_days"
