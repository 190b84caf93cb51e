"""
Order-creation request builder and order response mapper.
"""
from typing import Any, List, Optional, Sequence

from skyroute.core.errors import NormalizationError, PassengerCountMismatchError, UpstreamError
from skyroute.models.flight_models import (
    BookingConfirmation,
    BookingPassenger,
    BookingRequest,
    BookingRequestPassenger,
    OfferPassengerSlot,
)


def extract_passenger_slots(raw_offer: Any) -> List[OfferPassengerSlot]:
    """Upstream passenger ids/types from a fetched offer, in offer order."""
    passengers = raw_offer.get("passengers") if isinstance(raw_offer, dict) else None
    if not isinstance(passengers, list):
        return []

    slots = []
    for i, p in enumerate(passengers):
        if not isinstance(p, dict) or not p.get("id"):
            raise NormalizationError(f"passengers[{i}].id", "missing")
        slots.append(OfferPassengerSlot(id=p["id"], type=p.get("type")))
    return slots


def build_booking_request(
    offer_id: str,
    offer_passengers: Sequence[OfferPassengerSlot],
    passengers: Sequence[BookingPassenger]
) -> BookingRequest:
    """
    Bind already-validated passengers to the offer's passenger slots.

    Binding is positional: the i-th submitted passenger takes the i-th
    slot's id and type. No name or attribute matching is attempted, so a
    caller that reorders passengers between search and booking gets them
    bound to different slots.
    """
    if len(offer_passengers) != len(passengers):
        raise PassengerCountMismatchError(
            expected=len(offer_passengers),
            received=len(passengers)
        )

    bound = [
        BookingRequestPassenger(
            id=slot.id,
            type=slot.type,
            given_name=p.given_name.strip(),
            family_name=p.family_name.strip(),
            born_on=p.born_on,
            email=p.email.strip(),
            phone_number=p.phone_number.strip(),
            gender=p.gender,
            title=p.title,
        )
        for slot, p in zip(offer_passengers, passengers)
    ]

    return BookingRequest(offer_id=offer_id, passengers=bound)


def map_order_response(raw_response: Any, upstream_status: Optional[int] = None) -> BookingConfirmation:
    """
    Duffel order body → confirmation.

    {"data": {"id": "ord_...", "booking_reference": "RZPNX8", ...}}

    A body without an order id is not a confirmation, whatever the status.
    """
    order = raw_response.get("data") if isinstance(raw_response, dict) else None
    if not isinstance(order, dict) or not order.get("id"):
        raise UpstreamError("Malformed upstream response", upstream_status=upstream_status)

    return BookingConfirmation(
        order_id=str(order["id"]),
        booking_reference=order.get("booking_reference"),
        status=order.get("status"),
    )
