import logging
from datetime import datetime

from flask import Flask, request, jsonify
from flask_cors import CORS
from sqlalchemy import text, case
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from config import config
from db.connection import engine, SessionLocal
from db.models import Base, ReplenishmentForecast
from models.batch_model import forecast_facility, group_records, summarize_batch
from models.catalog_model import SqlProgramCatalog, forecast_program
from models.facility_data import load_stock_items, load_consumption_records
from models.method_model import availability_from_answers, recommend_method, method_details
from models.payloads import stock_item_from_dict, record_from_dict, config_from_dict
from models.replenishment_model import validate_config
from models.requisition_model import build_requisition
from models.types import FacilityContext, ValidationError
from utils.ai_config import MODEL_VERSION, RRF_TARGET_MONTHS, DEFAULT_FORECAST_MONTHS

# ✅ Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger("CommoditySupply")

app = Flask(__name__)
CORS(app)


def init_db():
    try:
        Base.metadata.create_all(bind=engine)
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"❌ Database connection failed: {e}")
    else:
        logger.info("✅ Replenishment tables ensured in database.")


if config.DB_INIT_ON_STARTUP:
    init_db()

logger.info("🚀 Commodity supply service initialized successfully.")


def _insert(table):
    if engine.dialect.name == "sqlite":
        return sqlite_insert(table)
    return pg_insert(table)


def _validation_error(exc: ValidationError):
    return jsonify({"status": "error", "message": str(exc), "errors": exc.to_dict()}), 400


def _parse_config(data):
    raw = data.get("config", data)
    if not isinstance(raw, dict):
        raise ValidationError([("config", "must be an object")])
    cfg = config_from_dict(raw)
    errors = validate_config(cfg)
    if errors:
        raise ValidationError(errors)
    return cfg


@app.route("/api/v1/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"})


@app.route("/api/v1/replenishment/calculate", methods=["POST"])
def calculate_replenishment():
    """
    Stateless calculation; nothing is stored.
    Body:
    {
      "items": [{"product_id": "P1", "current_stock": 450, "reorder_level": 100, ...}],
      "consumption": [{"product_id": "P1", "period_label": "2025-01", "consumed_quantity": 85}],
      "config": {"window_days": 90, "lead_time_days_override": 30},   # optional
      "facility_id": 12,                                              # optional
      "user_id": "u-1"                                                # optional
    }
    """
    data = request.get_json(silent=True) or {}
    raw_items = data.get("items")
    if not isinstance(raw_items, list):
        return jsonify({"status": "error", "message": "items (list) is required"}), 400

    try:
        cfg = _parse_config(data)
        records = [record_from_dict(r) for r in data.get("consumption") or []]
    except ValidationError as exc:
        return _validation_error(exc)

    items, failures = [], []
    for idx, raw in enumerate(raw_items):
        raw = raw if isinstance(raw, dict) else {}
        try:
            items.append(stock_item_from_dict(raw))
        except ValidationError as exc:
            failures.append({"product_id": raw.get("product_id", f"items[{idx}]"), "errors": exc.to_dict()})

    ctx = FacilityContext(facility_id=data.get("facility_id"), user_id=data.get("user_id"))
    batch = forecast_facility(items, records, cfg, ctx)
    batch.failures = failures + batch.failures

    return jsonify({
        "status": "success",
        "count": len(batch.results),
        "summary": summarize_batch(batch),
        **batch.to_dict(),
    })


@app.route("/api/v1/replenishment", methods=["POST"])
def compute_replenishment():
    """
    Body:
    {
      "facility_id": 12,
      "user_id": "u-1",                   # optional
      "window_days": 90,                  # optional (default FORECAST_WINDOW_DAYS)
      "lead_time_days_override": 30,      # optional
      "safety_stock_days_override": 15    # optional
    }
    """
    data = request.get_json(silent=True) or {}
    facility_id = data.get("facility_id")
    if not facility_id:
        return jsonify({"status": "error", "message": "facility_id is required"}), 400

    try:
        cfg = _parse_config(data)
    except ValidationError as exc:
        return _validation_error(exc)

    items = load_stock_items(facility_id)
    if not items:
        return jsonify({"status": "ok", "count": 0, "message": "No stock balances found for facility."}), 200

    records = load_consumption_records(facility_id, cfg.window_days, cfg.period_days)
    ctx = FacilityContext(facility_id=facility_id, user_id=data.get("user_id"))
    batch = forecast_facility(items, records, cfg, ctx)

    if not batch.results:
        return jsonify({"status": "ok", "count": 0, "failures": batch.failures,
                        "message": "No product passed validation."}), 200

    rows = [
        {
            "facility_id": facility_id,
            "product_id": r.product_id,
            "average_monthly_consumption": r.average_monthly_consumption,
            "suggested_order_quantity": r.suggested_order_quantity,
            "days_until_stockout": r.days_until_stockout,
            "months_of_stock": r.months_of_stock,
            "current_stock": r.current_stock,
            "priority": r.priority.value,
            "stock_status": r.stock_status,
            "confidence": r.confidence,
            "lead_time_days": r.lead_time_days,
            "safety_stock_days": r.safety_stock_days,
            "generated_by": r.generated_by,
            "model_version": MODEL_VERSION,
        }
        for r in batch.results
    ]

    db = SessionLocal()
    try:
        stmt = _insert(ReplenishmentForecast).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                ReplenishmentForecast.facility_id,
                ReplenishmentForecast.product_id,
                ReplenishmentForecast.model_version
            ],
            set_={
                "average_monthly_consumption": stmt.excluded.average_monthly_consumption,
                "suggested_order_quantity": stmt.excluded.suggested_order_quantity,
                "days_until_stockout": stmt.excluded.days_until_stockout,
                "months_of_stock": stmt.excluded.months_of_stock,
                "current_stock": stmt.excluded.current_stock,
                "priority": stmt.excluded.priority,
                "stock_status": stmt.excluded.stock_status,
                "confidence": stmt.excluded.confidence,
                "lead_time_days": stmt.excluded.lead_time_days,
                "safety_stock_days": stmt.excluded.safety_stock_days,
                "generated_by": stmt.excluded.generated_by,
                "generated_at": datetime.utcnow()
            }
        )
        db.execute(stmt)
        db.commit()
        return jsonify({
            "status": "success",
            "count": len(rows),
            "failures": batch.failures,
            "summary": summarize_batch(batch),
        })
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Failed to store forecasts for facility {facility_id}: {e}")
        return jsonify({"status": "error", "message": str(e)}), 500
    finally:
        db.close()


@app.route("/api/v1/replenishment/<int:facility_id>", methods=["GET"])
def get_replenishment(facility_id):
    db = SessionLocal()
    try:
        priority_rank = case(
            {"High": 0, "Medium": 1, "Low": 2},
            value=ReplenishmentForecast.priority,
            else_=3,
        )
        rows = (
            db.query(ReplenishmentForecast)
            .filter_by(facility_id=facility_id)
            .order_by(priority_rank, ReplenishmentForecast.product_id)
            .all()
        )
        return jsonify([
            {
                "product_id": r.product_id,
                "average_monthly_consumption": float(r.average_monthly_consumption),
                "suggested_order_quantity": int(r.suggested_order_quantity),
                "days_until_stockout": float(r.days_until_stockout) if r.days_until_stockout is not None else None,
                "months_of_stock": float(r.months_of_stock) if r.months_of_stock is not None else None,
                "current_stock": float(r.current_stock),
                "priority": r.priority,
                "stock_status": r.stock_status,
                "confidence": float(r.confidence),
                "generated_by": r.generated_by,
                "generated_at": r.generated_at.strftime("%Y-%m-%d %H:%M:%S")
            } for r in rows
        ])
    finally:
        db.close()


@app.route("/api/v1/forecast/method", methods=["POST"])
def forecast_method():
    """
    Body (wizard answers, "yes"/"no" or booleans):
    {
      "consumption": "yes",
      "stock_data": "yes",          # optional
      "service": "no",
      "population": "no",
      "disease_incidence": "no"     # optional
    }
    """
    data = request.get_json(silent=True) or {}
    available = availability_from_answers(data)
    method = recommend_method(available)
    return jsonify({"status": "ok", "recommended": method_details(method)})


@app.route("/api/v1/forecast/program", methods=["POST"])
def forecast_program_quantities():
    """
    Body:
    {
      "program": "Malaria",
      "forecast_months": 12,        # optional (default 12)
      "consumption": [...],         # optional monthly history
      "facility_id": 12,            # optional; history loaded from the database when consumption is absent
      "history_days": 365           # optional (default 365)
    }
    """
    data = request.get_json(silent=True) or {}
    program = data.get("program")
    if not program:
        return jsonify({"status": "error", "message": "program is required"}), 400

    forecast_months = data.get("forecast_months", DEFAULT_FORECAST_MONTHS)
    try:
        if data.get("consumption") is not None:
            records = [record_from_dict(r) for r in data["consumption"]]
        elif data.get("facility_id"):
            history_days = data.get("history_days", 365)
            if not isinstance(history_days, int) or isinstance(history_days, bool) or history_days <= 0:
                raise ValidationError([("history_days", "must be a positive whole number of days")])
            records = load_consumption_records(data["facility_id"], history_days)
        else:
            records = []
        result = forecast_program(program, SqlProgramCatalog(engine), group_records(records), forecast_months)
    except ValidationError as exc:
        return _validation_error(exc)

    if not result["products"]:
        return jsonify({"status": "ok", "count": 0, "message": f"No products configured for program {program}."}), 200

    return jsonify({"status": "success", "count": result["total_products"], **result})


@app.route("/api/v1/rrf/suggest", methods=["POST"])
def rrf_suggest():
    """
    Body:
    {
      "lines": [{"item_id": "P1", "soh": 40, "amc": 20, "pipeline": 10, "final_order": null}],
      "target_months": 3    # optional
    }
    """
    data = request.get_json(silent=True) or {}
    lines = data.get("lines")
    if not isinstance(lines, list):
        return jsonify({"status": "error", "message": "lines (list) is required"}), 400

    try:
        result = build_requisition(lines, data.get("target_months", RRF_TARGET_MONTHS))
    except ValidationError as exc:
        return _validation_error(exc)
    return jsonify({"status": "success", "count": len(result["lines"]), **result})


if __name__ == "__main__":
    app.run(host=config.FLASK_HOST, port=config.FLASK_PORT)
