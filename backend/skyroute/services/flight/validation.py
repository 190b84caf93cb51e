"""
Request-level input rules shared by search, calendar and booking options.
"""
import math
import re
from typing import Any, Optional

from skyroute.core.config import ALLOWED_CURRENCIES, DEFAULT_CURRENCY
from skyroute.core.errors import ValidationError
from skyroute.models.flight_models import Route

IATA_RE = re.compile(r"^[A-Z]{3}$")
DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
OFFER_ID_RE = re.compile(r"^[A-Za-z0-9_\-]+$")

MIN_PASSENGERS = 1
MAX_PASSENGERS = 9


def require_iata(value: Optional[str], field: str) -> str:
    if not isinstance(value, str) or not IATA_RE.fullmatch(value):
        raise ValidationError(f"Invalid {field}: must be 3 uppercase letters", field=field)
    return value


def require_date(value: Optional[str], field: str) -> str:
    if not isinstance(value, str) or not DATE_RE.fullmatch(value):
        raise ValidationError(f"Invalid {field}: must be YYYY-MM-DD", field=field)
    return value


def require_offer_id(value: Optional[str]) -> str:
    if not value:
        raise ValidationError("Missing offer_id", field="offer_id")
    if not isinstance(value, str) or not OFFER_ID_RE.fullmatch(value):
        raise ValidationError("Invalid offer_id", field="offer_id")
    return value


def validate_route(origin: Optional[str], destination: Optional[str]) -> Route:
    return Route(
        origin=require_iata(origin, "departure_id"),
        destination=require_iata(destination, "arrival_id"),
    )


def clamp_passengers(value: Any) -> int:
    """Floor to an int and clamp into [1, 9]; anything non-numeric counts as 1."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return MIN_PASSENGERS
    if math.isnan(number) or number == 0:
        return MIN_PASSENGERS
    if math.isinf(number):
        return MAX_PASSENGERS if number > 0 else MIN_PASSENGERS
    return max(MIN_PASSENGERS, min(MAX_PASSENGERS, math.floor(number)))


def resolve_currency(value: Optional[str]) -> str:
    if value and value in ALLOWED_CURRENCIES:
        return value
    return DEFAULT_CURRENCY
