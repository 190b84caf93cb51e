import asyncio
import json
from datetime import date
from decimal import Decimal

import httpx
import pytest

from skyroute.core.errors import ValidationError
from skyroute.models.flight_models import Route
from skyroute.services.flight.calendar import CalendarSampler, generate_sample_dates

ROUTE = Route(origin="DAM", destination="DXB")
BEFORE_MARCH = date(2026, 2, 1)


def _departure_date(request: httpx.Request) -> str:
    return json.loads(request.content)["data"]["slices"][0]["departure_date"]


def _offers(*amounts):
    return {"data": {"offers": [{"id": f"off_{i}", "total_amount": a} for i, a in enumerate(amounts)]}}


def test_sample_dates_step_three_days_inclusive():
    dates = generate_sample_dates("2026-03-01", "2026-03-10", today=BEFORE_MARCH)

    assert dates == ["2026-03-01", "2026-03-04", "2026-03-07", "2026-03-10"]


def test_sample_dates_capped_at_ten():
    dates = generate_sample_dates("2026-03-01", "2026-06-30", today=BEFORE_MARCH)

    assert len(dates) == 10
    assert dates[0] == "2026-03-01"
    assert dates[-1] == "2026-03-28"


def test_sample_dates_skip_past_days():
    dates = generate_sample_dates("2026-03-01", "2026-03-10", today=date(2026, 3, 5))

    assert dates == ["2026-03-07", "2026-03-10"]


def test_sample_dates_single_day_range():
    assert generate_sample_dates("2026-03-01", "2026-03-01", today=BEFORE_MARCH) == ["2026-03-01"]


def test_sample_dates_invalid_calendar_day():
    with pytest.raises(ValidationError):
        generate_sample_dates("2026-02-30", "2026-03-10", today=BEFORE_MARCH)


@pytest.mark.asyncio
async def test_failed_date_marked_no_flights(make_client):
    """A failing date keeps its slot; the rest of the calendar is intact."""
    prices = {"2026-03-01": ("320.00", "290.50"), "2026-03-04": ("275.00",), "2026-03-10": ("410.00",)}

    def handler(request):
        day = _departure_date(request)
        if day == "2026-03-07":
            return httpx.Response(500, json={"errors": [{"message": "Supplier error"}]})
        return httpx.Response(201, json=_offers(*prices[day]))

    client = make_client(handler)
    sampler = CalendarSampler(client, timeout=2.0, today=lambda: BEFORE_MARCH)

    calendar = await sampler.sample(ROUTE, "2026-03-01", "2026-03-10", 1, "USD")

    assert [e.date for e in calendar] == ["2026-03-01", "2026-03-04", "2026-03-07", "2026-03-10"]
    assert calendar[0].price == Decimal("290.50")
    assert calendar[2].has_no_flights is True
    assert calendar[2].price is None
    assert [e.is_lowest_price for e in calendar] == [False, True, False, False]
    assert len(client.requests) == 4


@pytest.mark.asyncio
async def test_empty_and_unpriced_results_are_no_flights(make_client):
    def handler(request):
        day = _departure_date(request)
        if day == "2026-03-01":
            return httpx.Response(201, json=_offers())
        if day == "2026-03-04":
            return httpx.Response(201, json=_offers("n/a"))
        return httpx.Response(201, json=_offers("99.00"))

    sampler = CalendarSampler(make_client(handler), timeout=2.0, today=lambda: BEFORE_MARCH)

    calendar = await sampler.sample(ROUTE, "2026-03-01", "2026-03-07", 1, "USD")

    assert [e.has_no_flights for e in calendar] == [True, True, False]
    for entry in calendar:
        assert not (entry.has_no_flights and entry.price is not None)


@pytest.mark.asyncio
async def test_transport_errors_and_timeouts_are_demoted(make_client):
    def handler(request):
        day = _departure_date(request)
        if day == "2026-03-01":
            raise httpx.ReadTimeout("slow supplier", request=request)
        if day == "2026-03-04":
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(201, json=_offers("150.00"))

    sampler = CalendarSampler(make_client(handler), timeout=2.0, today=lambda: BEFORE_MARCH)

    calendar = await sampler.sample(ROUTE, "2026-03-01", "2026-03-07", 1, "USD")

    assert [e.has_no_flights for e in calendar] == [True, True, False]
    assert calendar[2].is_lowest_price is True


@pytest.mark.asyncio
async def test_lowest_price_ties_all_flagged(make_client):
    sampler = CalendarSampler(
        make_client(lambda request: httpx.Response(201, json=_offers("200.00"))),
        timeout=2.0,
        today=lambda: BEFORE_MARCH
    )

    calendar = await sampler.sample(ROUTE, "2026-03-01", "2026-03-04", 1, "USD")

    assert all(e.is_lowest_price for e in calendar)


@pytest.mark.asyncio
async def test_no_surviving_dates_skips_upstream(make_client):
    client = make_client(lambda request: httpx.Response(201, json=_offers("1.00")))
    sampler = CalendarSampler(client, timeout=2.0, today=lambda: date(2026, 4, 1))

    calendar = await sampler.sample(ROUTE, "2026-03-01", "2026-03-10", 1, "USD")

    assert calendar == []
    assert client.requests == []


@pytest.mark.asyncio
async def test_order_follows_dates_not_completion(make_client):
    async def handler(request):
        day = _departure_date(request)
        # Earliest date answers last
        delay = {"2026-03-01": 0.05, "2026-03-04": 0.01, "2026-03-07": 0.0}[day]
        await asyncio.sleep(delay)
        return httpx.Response(201, json=_offers("100.00"))

    sampler = CalendarSampler(make_client(handler), timeout=2.0, today=lambda: BEFORE_MARCH)

    calendar = await sampler.sample(ROUTE, "2026-03-01", "2026-03-07", 1, "USD")

    assert [e.date for e in calendar] == ["2026-03-01", "2026-03-04", "2026-03-07"]


@pytest.mark.asyncio
async def test_cancellation_propagates(make_client):
    started = asyncio.Event()

    async def handler(request):
        started.set()
        await asyncio.sleep(30)
        return httpx.Response(201, json=_offers("100.00"))

    sampler = CalendarSampler(make_client(handler), timeout=60.0, today=lambda: BEFORE_MARCH)
    task = asyncio.create_task(sampler.sample(ROUTE, "2026-03-01", "2026-03-10", 1, "USD"))

    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_request_body_carries_calendar_supplier_timeout(make_client):
    client = make_client(lambda request: httpx.Response(201, json=_offers("100.00")))
    sampler = CalendarSampler(client, timeout=2.0, today=lambda: BEFORE_MARCH)

    await sampler.sample(ROUTE, "2026-03-01", "2026-03-01", 3, "AED")

    body = json.loads(client.requests[0].content)["data"]
    assert body["supplier_timeout"] == 8000
    assert body["currency"] == "AED"
    assert body["passengers"] == [{"type": "adult"}] * 3
    assert client.requests[0].headers["Authorization"] == "Bearer duffel_test_token"
