"""Typed domain errors for the itinerary router.

All errors inherit from ItineraryRouterError and can optionally wrap a
root cause exception for debugging.

Only NoPlacesResolvedError, InvalidOriginError and InvalidRequestError
ever reach the caller of ``ItineraryPlanner.plan_itinerary``; the others
are recovered inside the pipeline (failed places, walking legs).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import FailedPlace


@dataclass
class ItineraryRouterError(Exception):
    """Base error for the itinerary router domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class NotFoundInCityError(ItineraryRouterError):
    """A place name could not be confidently placed inside the target city.

    Upstream transport and parse failures during resolution are folded
    into this error.

    Attributes:
        query: The place name as typed by the caller
        city: Label of the target city
    """

    query: str = ""
    city: str = ""

    reason = "NotFoundInCity"


@dataclass
class NoPlacesResolvedError(ItineraryRouterError):
    """Every requested place failed to resolve.

    Attributes:
        failed: Per-place failure details, in request order
    """

    failed: tuple[FailedPlace, ...] = ()


@dataclass
class InvalidOriginError(ItineraryRouterError):
    """Malformed origin coordinates, empty origin text or unresolvable origin.

    Attributes:
        origin: The offending origin, rendered as text
    """

    origin: str = ""


@dataclass
class InvalidRequestError(ItineraryRouterError):
    """The request itself is malformed (e.g. no place names)."""


@dataclass
class UpstreamError(ItineraryRouterError):
    """An upstream web service call failed or returned garbage.

    Attributes:
        service: Name of the upstream endpoint
        status: Upstream status / info code if any
    """

    service: str = ""
    status: Optional[str] = None


@dataclass
class ConfigurationError(ItineraryRouterError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
    """

    setting_name: str = ""
