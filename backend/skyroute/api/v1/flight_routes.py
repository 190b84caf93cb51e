"""
SkyRoute API - Flight Routes
Duffel offers through the flight facade

Endpoints:
    POST /api/flights          - One-shot flight search
    POST /api/calendar         - Sampled price calendar
    POST /api/booking-options  - Single offer details
"""

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder

from skyroute.api.deps import get_facade
from skyroute.models.flight_models import (
    BookingOptionsRequest,
    CalendarRequest,
    FlightSearchRequest,
)
from skyroute.services.flight.facade import FlightFacade

router = APIRouter(tags=["Flights"])


# --------------------------------------------------
# FLIGHT SEARCH
# --------------------------------------------------
@router.post("/flights")
async def search_flights_endpoint(
    body: FlightSearchRequest,
    facade: FlightFacade = Depends(get_facade)
):
    """
    Normalized offers, cheapest flagged `is_best`
    """
    flights = await facade.search_flights(
        origin=body.departure_id,
        destination=body.arrival_id,
        departure_date=body.outbound_date,
        adults=body.adults,
        currency=body.currency
    )

    cheapest = next((f for f in flights if f.is_best), None)

    return jsonable_encoder({
        "route": f"{body.departure_id} → {body.arrival_id}",
        "date": body.outbound_date,
        "count": len(flights),
        "cheapest": cheapest.price if cheapest else None,
        "flights": flights
    })


# --------------------------------------------------
# PRICE CALENDAR
# --------------------------------------------------
@router.post("/calendar")
async def price_calendar_endpoint(
    body: CalendarRequest,
    facade: FlightFacade = Depends(get_facade)
):
    """
    Cheapest fare per sampled date in the requested range
    """
    # Single-day requests only send outbound_date
    calendar = await facade.get_price_calendar(
        origin=body.departure_id,
        destination=body.arrival_id,
        start=body.outbound_date_start or body.outbound_date,
        end=body.outbound_date_end or body.outbound_date,
        adults=body.adults,
        currency=body.currency
    )
    return jsonable_encoder({"calendar": calendar})


# --------------------------------------------------
# OFFER DETAILS
# --------------------------------------------------
@router.post("/booking-options")
async def booking_options_endpoint(
    body: BookingOptionsRequest,
    facade: FlightFacade = Depends(get_facade)
):
    """
    Offer blob for the booking page (+ Google Flights link when the route is known)
    """
    details = await facade.get_offer_details(
        offer_id=body.offer_id,
        origin=body.departure_id,
        destination=body.arrival_id,
        departure_date=body.outbound_date,
        currency=body.currency
    )

    response = {"offer": details.offer}
    if details.flight is not None:
        response["flight"] = details.flight
    if details.google_flights_url:
        response["google_flights_url"] = details.google_flights_url

    return jsonable_encoder(response)
