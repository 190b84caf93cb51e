"""
SkyRoute - Configuration

Values come from the environment (and an optional .env file).
"""

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from skyroute.core.errors import ConfigurationError

load_dotenv()

ALLOWED_CURRENCIES = ("USD", "AED", "SAR")
DEFAULT_CURRENCY = "USD"

# Upstream supplier_timeout hints, milliseconds
SEARCH_SUPPLIER_TIMEOUT_MS = 25000
CALENDAR_SUPPLIER_TIMEOUT_MS = 8000


class Settings(BaseModel):
    duffel_api_token: Optional[str] = None
    duffel_api_version: str = "v2"
    duffel_base_url: str = "https://api.duffel.com/air"
    search_timeout: float = 30.0     # seconds, single user-triggered search
    calendar_timeout: float = 12.0   # seconds, per sampled date
    log_level: str = "INFO"

    def require_token(self) -> str:
        if not self.duffel_api_token:
            raise ConfigurationError("Server misconfiguration: missing API token")
        return self.duffel_api_token


@lru_cache
def get_settings() -> Settings:
    return Settings(
        duffel_api_token=os.getenv("DUFFEL_API_TOKEN") or None,
        duffel_api_version=os.getenv("DUFFEL_API_VERSION", "v2"),
        duffel_base_url=os.getenv("DUFFEL_BASE_URL", "https://api.duffel.com/air"),
        search_timeout=float(os.getenv("SEARCH_TIMEOUT_SECONDS", "30")),
        calendar_timeout=float(os.getenv("CALENDAR_TIMEOUT_SECONDS", "12")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
