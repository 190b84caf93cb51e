import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

# 1. Force the backend directory into sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1] / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

# 2. Mock environment variables for testing
os.environ["DUFFEL_API_TOKEN"] = "duffel_test_token"

from skyroute.core.config import Settings  # noqa: E402
from skyroute.services.integration.duffel.client import DuffelClient  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    return Settings(duffel_api_token="duffel_test_token", search_timeout=5.0, calendar_timeout=2.0)


@pytest.fixture
def make_client(settings):
    """
    DuffelClient over an httpx.MockTransport.

    The handler gets the httpx.Request and returns an httpx.Response
    (sync or async). Every request seen is appended to `client.requests`.
    """
    def _make(handler: Callable) -> DuffelClient:
        seen: List[httpx.Request] = []

        async def recording_handler(request: httpx.Request):
            seen.append(request)
            result = handler(request)
            if not isinstance(result, httpx.Response):
                result = await result
            return result

        http = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
        client = DuffelClient(settings, http=http)
        client.requests = seen
        return client

    return _make


def _segment(
    origin: str,
    destination: str,
    departing_at: str,
    arriving_at: str,
    carrier: str = "FZ",
    number: str = "1234",
    **extra: Any
) -> Dict[str, Any]:
    segment = {
        "origin": {"iata_code": origin, "name": f"{origin} International"},
        "destination": {"iata_code": destination, "name": f"{destination} International"},
        "departing_at": departing_at,
        "arriving_at": arriving_at,
        "duration": "PT1H",
        "operating_carrier": {"name": "flydubai", "iata_code": carrier, "logo_symbol_url": None},
        "marketing_carrier": {
            "name": "flydubai",
            "iata_code": carrier,
            "logo_symbol_url": f"https://assets.duffel.com/img/airlines/{carrier}.svg",
        },
        "marketing_carrier_flight_number": number,
        "aircraft": {"name": "Boeing 737-800"},
        "passengers": [{"cabin_class": "economy", "cabin_class_marketing_name": "Economy"}],
    }
    segment.update(extra)
    return segment


@pytest.fixture
def make_segment():
    return _segment


@pytest.fixture
def make_offer():
    def _make(
        offer_id: str = "off_0001",
        amount: Any = "250.00",
        currency: str = "USD",
        segments: Optional[List[Dict[str, Any]]] = None,
        passengers: Optional[List[Dict[str, Any]]] = None,
        duration: Optional[str] = "PT3H",
        **extra: Any
    ) -> Dict[str, Any]:
        offer = {
            "id": offer_id,
            "total_amount": amount,
            "total_currency": currency,
            "total_emissions_kg": "180",
            "slices": [
                {
                    "duration": duration,
                    "fare_brand_name": "Value",
                    "segments": segments if segments is not None else [
                        _segment("DAM", "DXB", "2026-03-15T10:00:00", "2026-03-15T13:00:00")
                    ],
                }
            ],
            "passengers": passengers if passengers is not None else [
                {"id": "pas_0001", "type": "adult"}
            ],
            "conditions": {
                "refund_before_departure": {"allowed": False, "penalty_amount": None, "penalty_currency": None},
                "change_before_departure": {"allowed": True, "penalty_amount": "50.00", "penalty_currency": currency},
            },
        }
        offer.update(extra)
        return offer

    return _make


@pytest.fixture
def passenger_data() -> Dict[str, str]:
    return {
        "given_name": "Layla",
        "family_name": "Haddad",
        "born_on": "1990-04-12",
        "email": "layla@example.com",
        "phone_number": "+963 11 234 5678",
        "gender": "f",
        "title": "ms",
    }
