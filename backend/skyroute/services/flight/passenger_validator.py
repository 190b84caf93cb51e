"""
Passenger field rules for order creation.

Rules run in a fixed order and only the first failure per passenger is
reported, as "Passenger <n>: <problem>" with a 1-based index.
"""
import re
from typing import Callable, List, Optional, Sequence, Tuple

from skyroute.core.errors import ValidationError
from skyroute.models.flight_models import BookingPassenger

BORN_ON_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?[0-9\s\-()]{7,}$", re.ASCII)

GENDERS = ("m", "f")
TITLES = ("mr", "ms", "mrs")


def _trimmed(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


RULES: List[Tuple[str, str, Callable[[BookingPassenger], bool]]] = [
    ("given_name", "missing given_name", lambda p: bool(_trimmed(p.given_name))),
    ("family_name", "missing family_name", lambda p: bool(_trimmed(p.family_name))),
    ("born_on", "invalid born_on", lambda p: bool(p.born_on and BORN_ON_RE.fullmatch(p.born_on))),
    ("email", "invalid email", lambda p: bool(EMAIL_RE.fullmatch(_trimmed(p.email)))),
    ("phone_number", "invalid phone_number", lambda p: bool(PHONE_RE.fullmatch(_trimmed(p.phone_number)))),
    ("gender", "invalid gender", lambda p: p.gender in GENDERS),
    ("title", "invalid title", lambda p: p.title in TITLES),
]


def validate_passenger(passenger: BookingPassenger, index: int) -> Optional[ValidationError]:
    """First failing rule for one passenger (0-based `index`), or None."""
    for field, problem, check in RULES:
        if not check(passenger):
            return ValidationError(f"Passenger {index + 1}: {problem}", field=field)
    return None


def validate_passengers(passengers: Sequence[BookingPassenger]) -> List[ValidationError]:
    """One error per invalid passenger; empty when all are valid."""
    errors = []
    for index, passenger in enumerate(passengers):
        error = validate_passenger(passenger, index)
        if error is not None:
            errors.append(error)
    return errors


def first_invalid_passenger(passengers: Sequence[BookingPassenger]) -> Optional[ValidationError]:
    for index, passenger in enumerate(passengers):
        error = validate_passenger(passenger, index)
        if error is not None:
            return error
    return None
