"""
SkyRoute - Error taxonomy

Every error carries a short message, a machine code and the HTTP status
class the API layer answers with.

    ValidationError              400  bad caller input
    PassengerCountMismatchError  400  offer slots != submitted passengers
    OfferNotFoundError           404  offer missing or expired upstream
    ConfigurationError           500  missing credential / settings
    UpstreamError                502  non-2xx or malformed upstream payload
    SearchFailedError            502  flight search rejected upstream
    BookingFailedError           502  order creation rejected upstream
    NormalizationError           502  one offer could not be parsed
    UpstreamTimeoutError         504  upstream did not answer in time
"""

from typing import Optional

from pydantic import BaseModel


class AppError(BaseModel):
    """Wire shape of every error response."""
    error: str
    code: str


class SkyRouteError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> AppError:
        return AppError(error=self.message, code=self.code)


class ValidationError(SkyRouteError):
    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class PassengerCountMismatchError(ValidationError):
    code = "PASSENGER_COUNT_MISMATCH"

    def __init__(self, expected: int, received: int):
        super().__init__(
            f"Passenger count mismatch: offer expects {expected}, got {received}",
            field="passengers",
        )
        self.expected = expected
        self.received = received


class OfferNotFoundError(SkyRouteError):
    status_code = 404
    code = "OFFER_NOT_FOUND"


class ConfigurationError(SkyRouteError):
    status_code = 500
    code = "CONFIGURATION_ERROR"


class UpstreamError(SkyRouteError):
    status_code = 502
    code = "UPSTREAM_ERROR"

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class SearchFailedError(UpstreamError):
    code = "SEARCH_FAILED"


class BookingFailedError(UpstreamError):
    code = "BOOKING_FAILED"


class UpstreamTimeoutError(SkyRouteError):
    status_code = 504
    code = "UPSTREAM_TIMEOUT"


class NormalizationError(SkyRouteError):
    status_code = 502
    code = "NORMALIZATION_ERROR"

    def __init__(self, field: str, detail: Optional[str] = None):
        message = f"Malformed offer field '{field}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.field = field
