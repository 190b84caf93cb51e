"""
Flight search service - Duffel offer request integration.
"""
from typing import Any, Dict, List, Optional
import logging

from skyroute.core.errors import UpstreamError
from skyroute.models.flight_models import Route
from skyroute.services.integration.duffel.client import DuffelClient, UpstreamResponse

logger = logging.getLogger("SkyRoute-FlightSearch")

OFFER_REQUESTS_PATH = "/offer_requests?return_offers=true"


def build_offer_request(
    route: Route,
    departure_date: str,
    passenger_count: int,
    currency: str,
    supplier_timeout_ms: int,
    cabin_class: str = "economy"
) -> Dict[str, Any]:
    """One-way, all-adult offer request body."""
    return {
        "data": {
            "slices": [
                {
                    "origin": route.origin,
                    "destination": route.destination,
                    "departure_date": departure_date,
                }
            ],
            "passengers": [{"type": "adult"} for _ in range(passenger_count)],
            "cabin_class": cabin_class,
            "currency": currency,
            "supplier_timeout": supplier_timeout_ms,
        }
    }


def extract_offers(body: Any) -> List[Any]:
    """`data.offers` from an offer request response, [] when absent."""
    data = body.get("data") if isinstance(body, dict) else None
    offers = data.get("offers") if isinstance(data, dict) else None
    return offers if isinstance(offers, list) else []


def require_offers(response: UpstreamResponse) -> List[Any]:
    """`data.offers` from a 2xx response; a body without that list is an upstream fault."""
    data = response.data.get("data") if isinstance(response.data, dict) else None
    offers = data.get("offers") if isinstance(data, dict) else None
    if not isinstance(offers, list):
        raise UpstreamError("Malformed upstream response", upstream_status=response.status)
    return offers


async def request_offers(
    client: DuffelClient,
    route: Route,
    departure_date: str,
    passenger_count: int,
    currency: str,
    supplier_timeout_ms: int,
    timeout: Optional[float] = None
) -> UpstreamResponse:
    """
    Call the Duffel offer request endpoint.

    ⚠️ Returns the raw status and body. Does not normalize.
    """
    body = build_offer_request(route, departure_date, passenger_count, currency, supplier_timeout_ms)
    response = await client.post(OFFER_REQUESTS_PATH, body, timeout=timeout, operation="offer_request")

    if response.ok:
        logger.info(
            f"✈️ Duffel search OK | {route.origin}->{route.destination} | {departure_date} "
            f"| offers={len(extract_offers(response.data))}"
        )

    return response
