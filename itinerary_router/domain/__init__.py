"""Domain layer - Core business models and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import (
    ConfigurationError,
    InvalidOriginError,
    InvalidRequestError,
    ItineraryRouterError,
    NoPlacesResolvedError,
    NotFoundInCityError,
    UpstreamError,
)
from .models import (
    CityConstraint,
    CityInfo,
    CoordinateOrigin,
    FailedPlace,
    GeoPoint,
    ItineraryResult,
    Leg,
    OriginInput,
    PoiCandidate,
    ResolvedPlace,
    TextOrigin,
    TransitPlan,
    TransitSegment,
    TravelMode,
)

__all__ = [
    # Models
    "GeoPoint",
    "ResolvedPlace",
    "CityInfo",
    "CityConstraint",
    "PoiCandidate",
    "TransitSegment",
    "TransitPlan",
    "TravelMode",
    "Leg",
    "FailedPlace",
    "CoordinateOrigin",
    "TextOrigin",
    "OriginInput",
    "ItineraryResult",
    # Errors
    "ItineraryRouterError",
    "NotFoundInCityError",
    "NoPlacesResolvedError",
    "InvalidOriginError",
    "InvalidRequestError",
    "UpstreamError",
    "ConfigurationError",
]
