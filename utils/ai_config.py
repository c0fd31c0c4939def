MODEL_VERSION = "v1.0"
DAYS_PER_MONTH = 30  # AMC is expressed per 30-day month
DEFAULT_WINDOW_DAYS = 90  # 3 completed months of history
DEFAULT_PERIOD_DAYS = 30  # one consumption record per month

HIGH_PRIORITY_DAYS = 30  # fewer days of cover than this is urgent
MEDIUM_PRIORITY_DAYS = 60

MIN_TREND_PERIODS = 3  # minimum history to project a trend
TREND_FACTOR_MIN = 0.5
TREND_FACTOR_MAX = 2.0
MIN_VARIABILITY_CONFIDENCE = 0.3

RRF_TARGET_MONTHS = 3  # requisition policy: order up to 3 months of stock
DEFAULT_FORECAST_MONTHS = 12
