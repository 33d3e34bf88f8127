"""Application configuration.

Environment variables override all defaults.
"""

import os
from pathlib import Path
from typing import List


# Load .env for local development
try:
    from dotenv import load_dotenv  # type: ignore

    _BACKEND_DIR = Path(__file__).resolve().parents[2]
    load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)
except Exception:
    pass


def _csv_env(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if not raw:
        return default
    return [part.strip() for part in raw.split(",") if part.strip()]


class Settings:
    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./clinic.db")

    # CORS (specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = _csv_env(
        "CORS_ORIGINS",
        [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
    )

    # Hosts the API answers to
    ALLOWED_HOSTS: List[str] = _csv_env("ALLOWED_HOSTS", ["localhost", "127.0.0.1"])

    # Clinic details printed on the prescription header
    CLINIC_NAME: str = os.getenv("CLINIC_NAME", "Clinic")
    CLINIC_ADDRESS: str = os.getenv("CLINIC_ADDRESS", "")

    # Stock
    DEFAULT_LOW_STOCK_THRESHOLD: int = int(os.getenv("DEFAULT_LOW_STOCK_THRESHOLD", "10"))
    LOW_STOCK_ALERT_LIMIT: int = int(os.getenv("LOW_STOCK_ALERT_LIMIT", "10"))

    # Prescriptions
    PRESCRIPTION_LIST_LIMIT: int = int(os.getenv("PRESCRIPTION_LIST_LIMIT", "50"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
