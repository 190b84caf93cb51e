# backend/skyroute/models/flight_models.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, ConfigDict, PlainSerializer, model_validator

# Decimal internally, plain number on the wire
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Route(BaseModel):
    model_config = ConfigDict(frozen=True)

    origin: str             # IATA, e.g. "DAM"
    destination: str        # IATA, e.g. "DXB"


class Airport(BaseModel):
    model_config = ConfigDict(frozen=True)

    iata_code: str
    name: Optional[str] = None


class Price(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: Amount
    currency: str


class FlightLeg(BaseModel):
    model_config = ConfigDict(frozen=True)

    origin: Airport
    destination: Airport
    departing_at: datetime
    arriving_at: datetime
    departure_time: str     # "HH:MM"
    arrival_time: str       # "HH:MM"
    carrier_name: str
    carrier_code: str
    carrier_logo: Optional[str] = None
    flight_number: str      # "EK 912"
    cabin_class: Optional[str] = None
    aircraft: Optional[str] = None
    duration: Optional[int] = None   # minutes


class Layover(BaseModel):
    model_config = ConfigDict(frozen=True)

    airport: Airport
    duration: int           # minutes


class FareConditions(BaseModel):
    model_config = ConfigDict(frozen=True)

    refund_before_departure: Optional[bool] = None
    refund_penalty: Optional[Price] = None
    change_before_departure: Optional[bool] = None
    change_penalty: Optional[Price] = None


class Flight(BaseModel):
    """Canonical flight built from one upstream offer."""
    model_config = ConfigDict(frozen=True)

    offer_id: str
    origin: Airport
    destination: Airport
    legs: List[FlightLeg]
    layovers: List[Layover] = []
    total_duration: int     # minutes
    price: Price
    stops: int
    departure_time: str
    arrival_time: str
    airline_name: str
    airline_code: str
    airline_logo: Optional[str] = None
    flight_number: str
    is_best: bool = False
    fare_brand: Optional[str] = None
    conditions: Optional[FareConditions] = None
    total_emissions_kg: Optional[int] = None

    @model_validator(mode="after")
    def _check_shape(self) -> "Flight":
        if not self.legs:
            raise ValueError("a flight needs at least one leg")
        if self.stops != len(self.legs) - 1:
            raise ValueError("stops must equal len(legs) - 1")
        if len(self.layovers) > len(self.legs) - 1:
            raise ValueError("more layovers than connections")
        return self


class PriceCalendarEntry(BaseModel):
    date: str               # YYYY-MM-DD
    price: Optional[Amount] = None
    has_no_flights: bool = False
    is_lowest_price: bool = False

    @model_validator(mode="after")
    def _price_xor_no_flights(self) -> "PriceCalendarEntry":
        if self.has_no_flights and self.price is not None:
            raise ValueError("a priced date cannot be marked has_no_flights")
        if not self.has_no_flights and self.price is None:
            raise ValueError("an unpriced date must be marked has_no_flights")
        return self


# ═══════════════════════════════════════════════════════════════════
# BOOKING
# ═══════════════════════════════════════════════════════════════════

class BookingPassenger(BaseModel):
    """
    Raw passenger input. Field rules are applied by the passenger
    validator so callers get "Passenger N: ..." messages.
    """
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    born_on: Optional[str] = None        # YYYY-MM-DD
    email: Optional[str] = None
    phone_number: Optional[str] = None
    gender: Optional[str] = None         # m / f
    title: Optional[str] = None          # mr / ms / mrs


class OfferPassengerSlot(BaseModel):
    id: str                 # upstream passenger id, "pas_..."
    type: Optional[str] = None           # adult / child / ...


class BookingRequestPassenger(BaseModel):
    id: str
    type: Optional[str] = None
    given_name: str
    family_name: str
    born_on: str
    email: str
    phone_number: str
    gender: str
    title: str


class BookingRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    offer_id: str
    passengers: List[BookingRequestPassenger]

    def to_payload(self) -> dict:
        """Order-creation body for the upstream /orders endpoint."""
        return {
            "data": {
                "type": "pay_later",
                "selected_offers": [self.offer_id],
                "passengers": [p.model_dump(exclude_none=True) for p in self.passengers],
            }
        }


class BookingConfirmation(BaseModel):
    order_id: Optional[str] = None
    booking_reference: Optional[str] = None
    status: Optional[str] = None


class OfferDetails(BaseModel):
    offer: dict[str, Any]
    flight: Optional[Flight] = None
    google_flights_url: Optional[str] = None


# ═══════════════════════════════════════════════════════════════════
# API REQUEST BODIES
# ═══════════════════════════════════════════════════════════════════
# Shape checks live in services/flight/validation.py, not here.

class FlightSearchRequest(BaseModel):
    departure_id: Optional[str] = None
    arrival_id: Optional[str] = None
    outbound_date: Optional[str] = None
    adults: Any = 1
    currency: Optional[str] = None


class CalendarRequest(FlightSearchRequest):
    outbound_date_start: Optional[str] = None
    outbound_date_end: Optional[str] = None


class BookingOptionsRequest(BaseModel):
    offer_id: Optional[str] = None
    departure_id: Optional[str] = None
    arrival_id: Optional[str] = None
    outbound_date: Optional[str] = None
    currency: Optional[str] = None


class CreateOrderRequest(BaseModel):
    offer_id: Optional[str] = None
    passengers: Optional[List[BookingPassenger]] = None
