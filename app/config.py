from dotenv import load_dotenv
import os
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

# Database configuration
DB_HOST = os.getenv("MYSQL_HOST", "db")
DB_USER = os.getenv("MYSQL_USER", "user")
DB_PASSWORD = os.getenv("MYSQL_PASSWORD", "123456")
DB_NAME = os.getenv("MYSQL_DB", "warehouse_rental")
DB_PORT = os.getenv("MYSQL_PORT", "3306")

# JWT configuration
SECRET_KEY = os.getenv("SECRET_KEY", "your_secret_key_here")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# Application configuration
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("APP_PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

# Base URL configuration
BASE_URL = os.getenv("BASE_URL", "http://localhost:8000")

# Email configuration
EMAIL_FROM = os.getenv("EMAIL_FROM", "no-reply@sitra-warehouse.com")
EMAIL_FROM_NAME = os.getenv("EMAIL_FROM_NAME", "Sitra Warehouse")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "1025"))
EMAIL_SERVER = os.getenv("EMAIL_SERVER", "mailhog")
EMAIL_SUPPRESS_SEND = os.getenv("EMAIL_SUPPRESS_SEND", "false").lower() in ("1", "true")

# Background scheduler
SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "true").lower() == "true"
SCHEDULER_INTERVAL_MINUTES = int(os.getenv("SCHEDULER_INTERVAL_MINUTES", "60"))

# Database URL, a full DATABASE_URL wins over the MySQL parts
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"mysql+pymysql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)


class BusinessSettings(BaseSettings):
    """Commercial constants for quoting and billing, overridable with WAREHOUSE_* variables."""

    model_config = SettingsConfigDict(env_prefix="WAREHOUSE_", extra="ignore")

    currency: str = "BHD"
    currency_decimals: int = 3
    days_per_month: int = 30
    default_vat_rate: float = 10.0
    # Floor applied to the base rent of a quote, 0 disables it
    minimum_charge: float = 0.0
    mezzanine_very_short_discount_percent: float = 20.0
    office_monthly_rate: float = 0.0
    long_tenure_min_months: int = 12
    quote_validity_days: int = 30
    payment_terms: str = "Rent payable in advance on or before the first day of the lease month"


business_settings = BusinessSettings()
