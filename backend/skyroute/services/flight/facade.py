"""
Flight facade - the public operations behind the HTTP routes.

    search_flights      one-shot search, normalized and best-flagged
    get_price_calendar  sampled cheapest fare per date
    create_booking      validated pay-later order against one offer
    get_offer_details   single offer blob (+ normalized flight)

Input is validated before any upstream call. Nothing is retried here.
"""
import logging
from typing import Any, List, Optional, Sequence

from skyroute.core.config import SEARCH_SUPPLIER_TIMEOUT_MS, Settings
from skyroute.core.errors import (
    BookingFailedError,
    NormalizationError,
    OfferNotFoundError,
    SearchFailedError,
    UpstreamError,
    ValidationError,
)
from skyroute.data.reference import Destination, ReferenceDataProvider, destinations
from skyroute.models.flight_models import (
    BookingConfirmation,
    BookingPassenger,
    Flight,
    OfferDetails,
    PriceCalendarEntry,
)
from skyroute.services.flight.calendar import CalendarSampler
from skyroute.services.flight.mappers.booking_mapper import (
    build_booking_request,
    extract_passenger_slots,
    map_order_response,
)
from skyroute.services.flight.mappers.offer_mapper import normalize_offer, normalize_offers
from skyroute.services.flight.passenger_validator import first_invalid_passenger
from skyroute.services.flight.search import request_offers, require_offers
from skyroute.services.flight.validation import (
    clamp_passengers,
    require_date,
    require_iata,
    require_offer_id,
    resolve_currency,
    validate_route,
)
from skyroute.services.integration.common.duffel_error_mapper import extract_error_message
from skyroute.services.integration.duffel.client import DuffelClient

logger = logging.getLogger("SkyRoute-Facade")

GOOGLE_FLIGHTS_URL = "https://www.google.com/travel/flights?q=Flights+from+{origin}+to+{destination}+on+{date}&curr={currency}"


def _response_data(body: Any) -> Any:
    return body.get("data") if isinstance(body, dict) else None


class FlightFacade:
    def __init__(
        self,
        client: DuffelClient,
        settings: Settings,
        reference: Optional[ReferenceDataProvider[Destination]] = destinations,
        sampler: Optional[CalendarSampler] = None
    ):
        self.client = client
        self.settings = settings
        self.reference = reference
        self.sampler = sampler or CalendarSampler(client, timeout=settings.calendar_timeout)

    # --------------------------------------------------
    # SEARCH
    # --------------------------------------------------
    async def search_flights(
        self,
        origin: Optional[str],
        destination: Optional[str],
        departure_date: Optional[str],
        adults: Any = 1,
        currency: Optional[str] = None
    ) -> List[Flight]:
        route = validate_route(origin, destination)
        departure_date = require_date(departure_date, "outbound_date")
        passenger_count = clamp_passengers(adults)
        currency = resolve_currency(currency)

        response = await request_offers(
            self.client,
            route,
            departure_date,
            passenger_count,
            currency,
            supplier_timeout_ms=SEARCH_SUPPLIER_TIMEOUT_MS,
            timeout=self.settings.search_timeout,
        )
        if not response.ok:
            raise SearchFailedError(
                f"Flight search failed: {response.status}",
                upstream_status=response.status
            )

        raw_offers = require_offers(response)
        flights = normalize_offers(raw_offers, self.reference)
        logger.info(
            f"✈️ Search {route.origin} → {route.destination} | {departure_date} "
            f"| offers={len(raw_offers)} normalized={len(flights)}"
        )
        return flights

    # --------------------------------------------------
    # PRICE CALENDAR
    # --------------------------------------------------
    async def get_price_calendar(
        self,
        origin: Optional[str],
        destination: Optional[str],
        start: Optional[str],
        end: Optional[str] = None,
        adults: Any = 1,
        currency: Optional[str] = None
    ) -> List[PriceCalendarEntry]:
        route = validate_route(origin, destination)
        start = require_date(start, "outbound_date_start")
        end = require_date(end or start, "outbound_date_end")

        return await self.sampler.sample(
            route,
            start,
            end,
            clamp_passengers(adults),
            resolve_currency(currency),
        )

    # --------------------------------------------------
    # BOOKING
    # --------------------------------------------------
    async def create_booking(
        self,
        offer_id: Optional[str],
        passengers: Optional[Sequence[BookingPassenger]]
    ) -> BookingConfirmation:
        offer_id = require_offer_id(offer_id)
        if not passengers:
            raise ValidationError("Missing or empty passengers array", field="passengers")

        error = first_invalid_passenger(passengers)
        if error is not None:
            raise error

        offer_response = await self.client.get(f"/offers/{offer_id}", operation="offer")
        if not offer_response.ok:
            logger.error(f"❌ Offer {offer_id} fetch failed: {offer_response.status}")
            raise OfferNotFoundError("Offer not found or expired")

        raw_offer = _response_data(offer_response.data)
        # Booking against an offer we cannot read is never attempted.
        normalize_offer(raw_offer, self.reference)
        slots = extract_passenger_slots(raw_offer)

        request = build_booking_request(offer_id, slots, passengers)

        order_response = await self.client.post("/orders", request.to_payload(), operation="order")
        if not order_response.ok:
            raise BookingFailedError(
                extract_error_message(order_response.data, order_response.status, fallback="Booking failed"),
                upstream_status=order_response.status
            )

        confirmation = map_order_response(order_response.data, upstream_status=order_response.status)
        logger.info(f"✅ Order created | offer={offer_id} | order={confirmation.order_id}")
        return confirmation

    # --------------------------------------------------
    # OFFER DETAILS
    # --------------------------------------------------
    async def get_offer_details(
        self,
        offer_id: Optional[str],
        origin: Optional[str] = None,
        destination: Optional[str] = None,
        departure_date: Optional[str] = None,
        currency: Optional[str] = None
    ) -> OfferDetails:
        offer_id = require_offer_id(offer_id)
        # Route params are optional, only used for the deep link
        if origin:
            require_iata(origin, "departure_id")
        if destination:
            require_iata(destination, "arrival_id")
        if departure_date:
            require_date(departure_date, "outbound_date")

        response = await self.client.get(f"/offers/{offer_id}", operation="offer")
        if not response.ok:
            raise UpstreamError(
                f"Failed to fetch offer details: {response.status}",
                upstream_status=response.status
            )

        offer = _response_data(response.data)
        if not isinstance(offer, dict):
            raise UpstreamError("Failed to fetch offer details: empty offer", upstream_status=response.status)

        try:
            flight = normalize_offer(offer, self.reference)
        except NormalizationError as e:
            logger.warning(f"⚠️ Offer {offer_id} could not be normalized: {e.message}")
            flight = None

        google_flights_url = None
        if origin and destination and departure_date:
            google_flights_url = GOOGLE_FLIGHTS_URL.format(
                origin=origin,
                destination=destination,
                date=departure_date,
                currency=currency or "USD",
            )

        return OfferDetails(offer=offer, flight=flight, google_flights_url=google_flights_url)
