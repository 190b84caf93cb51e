"""
SkyRoute API - Booking Routes

Endpoints:
    POST /api/book  - Create a pay-later order against one offer
"""

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder

from skyroute.api.deps import get_facade
from skyroute.models.flight_models import CreateOrderRequest
from skyroute.services.flight.facade import FlightFacade

router = APIRouter(tags=["Bookings"])


@router.post("/book")
async def create_booking_endpoint(
    body: CreateOrderRequest,
    facade: FlightFacade = Depends(get_facade)
):
    """
    {offer_id, passengers} → {order_id, booking_reference, status}
    """
    confirmation = await facade.create_booking(
        offer_id=body.offer_id,
        passengers=body.passengers
    )
    return jsonable_encoder(confirmation)
