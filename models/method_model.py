from dataclasses import dataclass
from enum import Enum


class ForecastMethod(str, Enum):
    CONSUMPTION = "consumption"
    SERVICE = "service"
    DEMOGRAPHIC = "demographic"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class DataAvailability:
    consumption: bool = False
    stock_data: bool = True
    service: bool = False
    population: bool = False
    disease_incidence: bool = True


METHOD_DETAILS = {
    ForecastMethod.CONSUMPTION: {
        "name": "Consumption Method",
        "description": "Based on historical usage data from your facility",
        "assumptions": [
            "Based on 12 months historical consumption data",
            "Adjusted for seasonal variations (+15%)",
            "Safety stock: 2 months coverage",
            "Lead time: 3 months average",
        ],
    },
    ForecastMethod.SERVICE: {
        "name": "Service Statistics Method",
        "description": "Based on patient services and treatment protocols",
        "assumptions": [
            "Patient load: 850 patients/month average",
            "Treatment success rate: 85%",
            "Protocol adherence: 90%",
            "Wastage rate: 5%",
        ],
    },
    ForecastMethod.DEMOGRAPHIC: {
        "name": "Demographic Morbidity Method",
        "description": "Based on population size and disease patterns",
        "assumptions": [
            "Catchment population: 125,000",
            "Disease incidence: 12.3 per 1,000",
            "Coverage target: 85%",
            "Case detection rate: 75%",
        ],
    },
    ForecastMethod.HYBRID: {
        "name": "Hybrid / Demographic Method",
        "description": "Uses available data with demographic fallback",
        "assumptions": [
            "Multi-source data validation",
            "Population-based calculations with service adjustments",
            "Conservative estimates with 20% buffer",
            "Quarterly review and updates",
        ],
    },
}


def recommend_method(available: DataAvailability) -> ForecastMethod:
    """
    Pick the forecasting method the facility's data can support, strongest
    evidence first: consumption history (with stock records), service
    statistics, population with disease incidence, else hybrid.
    """
    if available.consumption and available.stock_data:
        return ForecastMethod.CONSUMPTION
    if available.service:
        return ForecastMethod.SERVICE
    if available.population and available.disease_incidence:
        return ForecastMethod.DEMOGRAPHIC
    return ForecastMethod.HYBRID


def _flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("yes", "true", "1", "y")
    return bool(value)


def availability_from_answers(answers: dict) -> DataAvailability:
    """
    Wizard answers ("yes"/"no" strings or booleans) to availability flags.
    Unanswered stock-data and incidence questions do not block a method.
    """
    return DataAvailability(
        consumption=_flag(answers.get("consumption", False)),
        stock_data=_flag(answers.get("stock_data", True)),
        service=_flag(answers.get("service", False)),
        population=_flag(answers.get("population", False)),
        disease_incidence=_flag(answers.get("disease_incidence", True)),
    )


def method_details(method: ForecastMethod) -> dict:
    return {"method": method.value, **METHOD_DETAILS[method]}
