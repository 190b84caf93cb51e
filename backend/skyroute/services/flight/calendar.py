"""
Price calendar sampling.

Probes a subset of dates in a range concurrently and reduces the cheapest
fare per date into calendar entries. One slow or failing date never blocks
or fails the others; it just shows up as "no flights".
"""
import asyncio
import logging
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, List, Optional

from skyroute.core.config import CALENDAR_SUPPLIER_TIMEOUT_MS
from skyroute.core.errors import SkyRouteError, ValidationError
from skyroute.core.metrics import record_calendar_outcome
from skyroute.models.flight_models import PriceCalendarEntry, Route
from skyroute.services.flight.mappers.offer_mapper import cheapest_amount
from skyroute.services.flight.search import extract_offers, request_offers
from skyroute.services.integration.duffel.client import DuffelClient

logger = logging.getLogger("SkyRoute-Calendar")

SAMPLE_STEP_DAYS = 3
MAX_SAMPLED_DATES = 10


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _parse_day(value: str, field: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(f"Invalid {field}: must be YYYY-MM-DD", field=field) from e


def generate_sample_dates(start: str, end: str, today: Optional[date] = None) -> List[str]:
    """
    Every third day from `start` through `end` (inclusive), skipping days
    before `today`, at most MAX_SAMPLED_DATES of them.
    """
    current = _parse_day(start, "outbound_date_start")
    last = _parse_day(end, "outbound_date_end")
    today = today or utc_today()

    dates: List[str] = []
    while current <= last and len(dates) < MAX_SAMPLED_DATES:
        if current >= today:
            dates.append(current.isoformat())
        current += timedelta(days=SAMPLE_STEP_DAYS)
    return dates


def flag_lowest(entries: List[PriceCalendarEntry]) -> List[PriceCalendarEntry]:
    """Mark every priced entry equal to the calendar minimum."""
    prices = [e.price for e in entries if e.price is not None]
    if not prices:
        return entries

    lowest = min(prices)
    return [
        e.model_copy(update={"is_lowest_price": True}) if e.price == lowest else e
        for e in entries
    ]


class CalendarSampler:
    def __init__(
        self,
        client: DuffelClient,
        timeout: float,
        supplier_timeout_ms: int = CALENDAR_SUPPLIER_TIMEOUT_MS,
        today: Callable[[], date] = utc_today
    ):
        self.client = client
        self.timeout = timeout
        self.supplier_timeout_ms = supplier_timeout_ms
        self.today = today

    async def _cheapest_for_date(
        self,
        route: Route,
        day: str,
        passenger_count: int,
        currency: str
    ) -> Optional[Decimal]:
        response = await request_offers(
            self.client,
            route,
            day,
            passenger_count,
            currency,
            supplier_timeout_ms=self.supplier_timeout_ms,
            timeout=self.timeout,
        )
        if not response.ok:
            return None
        return cheapest_amount(extract_offers(response.data))

    async def sample(
        self,
        route: Route,
        start: str,
        end: str,
        passenger_count: int,
        currency: str
    ) -> List[PriceCalendarEntry]:
        dates = generate_sample_dates(start, end, self.today())
        if not dates:
            logger.info(f"📅 No future dates to sample for {route.origin}->{route.destination}")
            return []

        logger.info(f"📅 Sampling {len(dates)} dates for {route.origin}->{route.destination}")

        # Cancelling the caller cancels every branch; gather re-raises it.
        results = await asyncio.gather(
            *(self._cheapest_for_date(route, d, passenger_count, currency) for d in dates),
            return_exceptions=True,
        )

        entries: List[PriceCalendarEntry] = []
        for day, result in zip(dates, results):
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                # CancelledError from a single branch: no partial calendar
                raise result

            if isinstance(result, SkyRouteError):
                logger.warning(f"⚠️ Calendar date {day} failed: {result.message}")
                result = None
            elif isinstance(result, Exception):
                logger.warning(f"⚠️ Calendar date {day} failed unexpectedly", exc_info=result)
                result = None

            record_calendar_outcome(priced=result is not None)
            if result is None:
                entries.append(PriceCalendarEntry(date=day, has_no_flights=True))
            else:
                entries.append(PriceCalendarEntry(date=day, price=result))

        entries = flag_lowest(entries)
        logger.info(f"📅 Returning {len(entries)} calendar entries")
        return entries
