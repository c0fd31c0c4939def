from dataclasses import dataclass, asdict, field
from enum import Enum

from utils.ai_config import DEFAULT_WINDOW_DAYS, DEFAULT_PERIOD_DAYS


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


# Days of stock when there is no recent consumption to estimate from
UNBOUNDED = None


class ValidationError(ValueError):
    """
    Malformed calculator input. `errors` holds (field, message) pairs so
    callers can report every offending field at once.
    """

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(f"{f}: {m}" for f, m in self.errors))

    @property
    def fields(self):
        return [f for f, _ in self.errors]

    def to_dict(self):
        return [{"field": f, "message": m} for f, m in self.errors]


class InsufficientDataError(Exception):
    """Not enough consumption history for the requested calculation."""


@dataclass(frozen=True)
class StockItem:
    product_id: str
    product_name: str
    current_stock: float
    unit: str
    reorder_level: float
    max_level: float
    consumption_per_period: float
    lead_time_days: int
    safety_stock_days: int


@dataclass(frozen=True)
class ConsumptionRecord:
    product_id: str
    period_label: str
    consumed_quantity: float


@dataclass(frozen=True)
class ForecastConfig:
    window_days: int = DEFAULT_WINDOW_DAYS
    lead_time_days_override: int | None = None
    safety_stock_days_override: int | None = None
    period_days: int = DEFAULT_PERIOD_DAYS
    exclude_zero_periods: bool = False


@dataclass(frozen=True)
class FacilityContext:
    facility_id: int | None = None
    user_id: str | None = None


@dataclass(frozen=True)
class ForecastResult:
    product_id: str
    average_monthly_consumption: float
    suggested_order_quantity: int
    days_until_stockout: float | None
    priority: Priority
    confidence: float
    product_name: str = ""
    unit: str = ""
    current_stock: float = 0.0
    months_of_stock: float | None = None
    stock_status: str = ""
    lead_time_days: int = 0
    safety_stock_days: int = 0
    facility_id: int | None = None
    generated_by: str | None = None

    def to_dict(self):
        row = asdict(self)
        row["priority"] = self.priority.value
        return row


@dataclass
class BatchForecast:
    results: list = field(default_factory=list)
    failures: list = field(default_factory=list)

    def to_dict(self):
        return {
            "results": [r.to_dict() for r in self.results],
            "failures": self.failures,
        }
