import pytest

from conftest import make_records
from models.trend_model import project_consumption
from models.types import InsufficientDataError, ValidationError


def test_flat_history():
    proj = project_consumption(make_records("P1", [100, 100, 100, 100]), forecast_months=12)

    assert proj["trend_factor"] == 1.0
    assert proj["forecast_quantity"] == 1200
    assert proj["confidence"] == 1.0
    assert proj["periods"] == 4


def test_growing_history_scales_the_projection():
    proj = project_consumption(make_records("P1", [50, 50, 100, 100]), forecast_months=12)

    assert proj["average_consumption"] == 75
    assert proj["trend_factor"] == 2.0
    assert proj["trend_pct"] == 100.0
    assert proj["forecast_quantity"] == 1800


def test_trend_factor_is_clamped():
    up = project_consumption(make_records("P1", [10, 10, 100, 100]), forecast_months=1)
    down = project_consumption(make_records("P1", [100, 100, 10, 10]), forecast_months=1)

    assert up["trend_factor"] == 2.0
    assert up["trend_pct"] == 900.0
    assert down["trend_factor"] == 0.5


def test_volatile_history_has_floor_confidence():
    proj = project_consumption(make_records("P1", [0, 0, 300]), forecast_months=6)

    assert proj["trend_factor"] == 1.0
    assert proj["confidence"] == 0.3


def test_needs_three_periods():
    with pytest.raises(InsufficientDataError):
        project_consumption(make_records("P1", [10, 20]))


def test_rejects_bad_input():
    with pytest.raises(ValidationError):
        project_consumption(make_records("P1", [10, -20, 30]))
    with pytest.raises(ValidationError):
        project_consumption(make_records("P1", [10, 20, 30]), forecast_months=0)
