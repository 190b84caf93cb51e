"""
Duffel offer payloads → canonical Flight model.

Everything here is pure: no I/O, no clock. A malformed offer raises
NormalizationError naming the offending field; batch helpers drop such
offers and keep the rest.
"""
import logging
import math
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from skyroute.core.errors import NormalizationError
from skyroute.data.reference import Destination, ReferenceDataProvider, airlines
from skyroute.models.flight_models import (
    Airport,
    FareConditions,
    Flight,
    FlightLeg,
    Layover,
    Price,
)

logger = logging.getLogger("SkyRoute-OfferMapper")

DURATION_RE = re.compile(
    r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$",
    re.ASCII
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_duration(value: Any) -> int:
    """
    ISO-8601 duration → whole minutes, seconds rounded to the nearest minute.

        PT2H26M    → 146
        PT45M      → 45
        PT2H26M30S → 147
        P1DT2H     → 1560
    """
    if not isinstance(value, str):
        raise NormalizationError("duration", f"not an ISO-8601 duration: {value!r}")

    match = DURATION_RE.match(value.strip())
    # "P" and "PT" match the pattern but carry no component
    if not match or all(group is None for group in match.groups()):
        raise NormalizationError("duration", f"not an ISO-8601 duration: {value!r}")

    days, hours, minutes, seconds = match.groups()
    total = int(days or 0) * 24 * 60 + int(hours or 0) * 60 + int(minutes or 0)
    if seconds:
        total += _round_half_up(float(seconds) / 60)
    return total


def extract_time(timestamp: str) -> str:
    """'2026-03-15T14:30:00' → '14:30' (also accepts a space separator)."""
    parts = re.split(r"[\sT]", timestamp, maxsplit=1)
    if len(parts) >= 2:
        return parts[1][:5]
    return timestamp


def parse_amount(value: Any) -> Optional[Decimal]:
    """Decimal amount or None when the value is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


def cheapest_amount(raw_offers: Iterable[Any]) -> Optional[Decimal]:
    """Minimum parseable total_amount across offers, None if there is none."""
    prices = [
        amount for amount in (
            parse_amount(o.get("total_amount")) for o in raw_offers if isinstance(o, dict)
        )
        if amount is not None
    ]
    return min(prices) if prices else None


# ═══════════════════════════════════════════════════════════════════
# FIELD HELPERS
# ═══════════════════════════════════════════════════════════════════

def _require(obj: Any, key: str, field: str) -> Any:
    value = obj.get(key) if isinstance(obj, dict) else None
    if value is None or value == "":
        raise NormalizationError(field, "missing")
    return value


def _parse_timestamp(value: Any, field: str) -> datetime:
    if not isinstance(value, str):
        raise NormalizationError(field, "missing")
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise NormalizationError(field, f"not an ISO datetime: {value!r}") from e


def _airport(raw: Any, field: str, reference: Optional[ReferenceDataProvider[Destination]]) -> Airport:
    code = _require(raw, "iata_code", f"{field}.iata_code")
    name = raw.get("name")
    if not name and reference is not None:
        known = reference.lookup_by_code(code)
        if known is not None:
            name = known.airport_name or known.city
    return Airport(iata_code=code, name=name)


def _penalty(condition: dict, currency: Optional[str]) -> Optional[Price]:
    amount = parse_amount(condition.get("penalty_amount"))
    penalty_currency = condition.get("penalty_currency") or currency
    if amount is None or not penalty_currency:
        return None
    return Price(amount=amount, currency=penalty_currency)


def _extract_conditions(raw_offer: dict) -> Optional[FareConditions]:
    conditions = raw_offer.get("conditions")
    if not isinstance(conditions, dict):
        return None

    refund = conditions.get("refund_before_departure")
    change = conditions.get("change_before_departure")
    if not isinstance(refund, dict) and not isinstance(change, dict):
        return None

    currency = raw_offer.get("total_currency")
    return FareConditions(
        refund_before_departure=refund.get("allowed") if isinstance(refund, dict) else None,
        refund_penalty=_penalty(refund, currency) if isinstance(refund, dict) else None,
        change_before_departure=change.get("allowed") if isinstance(change, dict) else None,
        change_penalty=_penalty(change, currency) if isinstance(change, dict) else None,
    )


def _extract_emissions(raw_offer: dict) -> Optional[int]:
    amount = parse_amount(raw_offer.get("total_emissions_kg"))
    return int(amount) if amount is not None else None


def _airline_name(code: str) -> str:
    known = airlines.lookup_by_code(code)
    return known.name if known is not None else code


def _cabin_class(segment: dict) -> Optional[str]:
    passengers = segment.get("passengers")
    if not isinstance(passengers, list) or not passengers or not isinstance(passengers[0], dict):
        return None
    return passengers[0].get("cabin_class_marketing_name") or passengers[0].get("cabin_class")


# ═══════════════════════════════════════════════════════════════════
# LEGS & LAYOVERS
# ═══════════════════════════════════════════════════════════════════

def map_segment(
    segment: dict,
    index: int,
    reference: Optional[ReferenceDataProvider[Destination]] = None
) -> FlightLeg:
    """One upstream segment → one FlightLeg."""
    field = f"segments[{index}]"
    if not isinstance(segment, dict):
        raise NormalizationError(field, "not an object")

    operating = segment.get("operating_carrier")
    operating = operating if isinstance(operating, dict) else {}
    marketing = segment.get("marketing_carrier")
    marketing = marketing if isinstance(marketing, dict) else {}
    if not operating and not marketing:
        raise NormalizationError(f"{field}.marketing_carrier", "missing")

    carrier_code = marketing.get("iata_code") or operating.get("iata_code")
    if not carrier_code:
        raise NormalizationError(f"{field}.marketing_carrier.iata_code", "missing")

    flight_number = segment.get("marketing_carrier_flight_number") or ""
    departing_raw = segment.get("departing_at")
    arriving_raw = segment.get("arriving_at")

    aircraft = segment.get("aircraft")
    duration = segment.get("duration")

    return FlightLeg(
        origin=_airport(segment.get("origin"), f"{field}.origin", reference),
        destination=_airport(segment.get("destination"), f"{field}.destination", reference),
        departing_at=_parse_timestamp(departing_raw, f"{field}.departing_at"),
        arriving_at=_parse_timestamp(arriving_raw, f"{field}.arriving_at"),
        departure_time=extract_time(departing_raw),
        arrival_time=extract_time(arriving_raw),
        carrier_name=operating.get("name") or marketing.get("name") or _airline_name(carrier_code),
        carrier_code=carrier_code,
        carrier_logo=operating.get("logo_symbol_url") or marketing.get("logo_symbol_url"),
        flight_number=f"{carrier_code} {flight_number}".strip(),
        cabin_class=_cabin_class(segment),
        aircraft=aircraft.get("name") if isinstance(aircraft, dict) else None,
        duration=parse_duration(duration) if duration else None,
    )


def derive_layovers(legs: List[FlightLeg]) -> List[Layover]:
    """
    Connection time between consecutive legs, at the connecting airport.
    Back-to-back legs (no gap) produce no layover.
    """
    layovers: List[Layover] = []
    for prior, following in zip(legs, legs[1:]):
        gap = _round_half_up((following.departing_at - prior.arriving_at).total_seconds() / 60)
        if gap > 0:
            layovers.append(Layover(airport=following.origin, duration=gap))
    return layovers


# ═══════════════════════════════════════════════════════════════════
# OFFER
# ═══════════════════════════════════════════════════════════════════

def normalize_offer(
    raw_offer: Any,
    reference: Optional[ReferenceDataProvider[Destination]] = None
) -> Flight:
    """
    Duffel offer → Flight. `is_best` is left False; see mark_best.

    Wrongly typed fields rejected by the models, and timestamps that cannot
    be compared (naive next to offset-aware), surface as NormalizationError
    like every other malformed offer.
    """
    try:
        return _build_flight(raw_offer, reference)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise NormalizationError(f"{e.title}.{location}" if location else e.title, first["msg"]) from e
    except TypeError as e:
        raise NormalizationError("segments", str(e)) from e


def _build_flight(
    raw_offer: Any,
    reference: Optional[ReferenceDataProvider[Destination]]
) -> Flight:
    if not isinstance(raw_offer, dict):
        raise NormalizationError("offer", "not an object")

    offer_id = _require(raw_offer, "id", "id")

    slices = raw_offer.get("slices")
    if not isinstance(slices, list) or not slices:
        raise NormalizationError("slices", "no slices")

    raw_segments: List[Any] = []
    for s in slices:
        if isinstance(s, dict) and isinstance(s.get("segments"), list):
            raw_segments.extend(s["segments"])
    if not raw_segments:
        raise NormalizationError("segments", "no segments")

    amount = parse_amount(raw_offer.get("total_amount"))
    if amount is None:
        raise NormalizationError("total_amount", f"not a number: {raw_offer.get('total_amount')!r}")
    currency = _require(raw_offer, "total_currency", "total_currency")

    legs = [map_segment(seg, i, reference) for i, seg in enumerate(raw_segments)]
    first, last = legs[0], legs[-1]

    slice_durations = [s.get("duration") for s in slices if isinstance(s, dict) and s.get("duration")]
    if slice_durations:
        total_duration = sum(parse_duration(d) for d in slice_durations)
    else:
        total_duration = _round_half_up((last.arriving_at - first.departing_at).total_seconds() / 60)

    first_slice = slices[0] if isinstance(slices[0], dict) else {}

    return Flight(
        offer_id=offer_id,
        origin=first.origin,
        destination=last.destination,
        legs=legs,
        layovers=derive_layovers(legs),
        total_duration=total_duration,
        price=Price(amount=amount, currency=currency),
        stops=len(legs) - 1,
        departure_time=first.departure_time,
        arrival_time=last.arrival_time,
        airline_name=first.carrier_name,
        airline_code=first.carrier_code,
        airline_logo=first.carrier_logo,
        flight_number=first.flight_number,
        fare_brand=first_slice.get("fare_brand_name"),
        conditions=_extract_conditions(raw_offer),
        total_emissions_kg=_extract_emissions(raw_offer),
    )


def mark_best(flights: List[Flight]) -> List[Flight]:
    """
    Flag every flight priced at the set minimum as best (ties included).
    Input order is preserved.
    """
    if not flights:
        return []

    lowest = min(f.price.amount for f in flights)
    return [f.model_copy(update={"is_best": f.price.amount == lowest}) for f in flights]


def normalize_offers(
    raw_offers: Any,
    reference: Optional[ReferenceDataProvider[Destination]] = None
) -> List[Flight]:
    """Normalize a result set, dropping malformed offers, then mark best."""
    if not isinstance(raw_offers, list):
        return []

    flights: List[Flight] = []
    for position, raw in enumerate(raw_offers):
        try:
            flights.append(normalize_offer(raw, reference))
        except NormalizationError as e:
            offer_id = raw.get("id") if isinstance(raw, dict) else None
            logger.warning(f"⚠️ Dropping offer #{position} ({offer_id}): {e.message}")

    return mark_best(flights)
