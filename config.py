import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    FLASK_ENV = os.getenv("FLASK_ENV", "production")
    FLASK_HOST = os.getenv("FLASK_HOST", "0.0.0.0")
    FLASK_PORT = int(os.getenv("FLASK_PORT", "6000"))

    DB_HOST = os.getenv("DB_HOST", "127.0.0.1")
    DB_PORT = int(os.getenv("DB_PORT", "5432"))
    DB_NAME = os.getenv("DB_NAME", "commodity_supply")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "postgres")

    SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"
    DB_INIT_ON_STARTUP = os.getenv("DB_INIT_ON_STARTUP", "true").lower() == "true"

    # Replenishment defaults; per-request values take precedence
    FORECAST_WINDOW_DAYS = int(os.getenv("FORECAST_WINDOW_DAYS", "90"))
    LEAD_TIME_DAYS = int(os.getenv("LEAD_TIME_DAYS", "30"))
    SAFETY_STOCK_DAYS = int(os.getenv("SAFETY_STOCK_DAYS", "15"))

    @property
    def DATABASE_URL(self):
        override = os.getenv("DATABASE_URL")
        if override:
            return override
        return (
            f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


config = Config()
