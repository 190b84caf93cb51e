from fastapi import Request

from skyroute.core.config import get_settings
from skyroute.services.flight.facade import FlightFacade
from skyroute.services.integration.duffel.client import DuffelClient


def get_facade(request: Request) -> FlightFacade:
    """
    Per-request facade over the app-wide httpx client.
    A missing API token raises ConfigurationError here, before any upstream call.
    """
    settings = get_settings()
    http = getattr(request.app.state, "http", None)
    return FlightFacade(DuffelClient(settings, http=http), settings)
