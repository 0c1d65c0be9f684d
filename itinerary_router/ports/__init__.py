"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the planning core and the upstream
mapping services. They enable dependency injection and let tests run
against in-memory fakes.
"""

from .cache import CachePort
from .geocoding import GeocoderPort
from .poi import PoiSearchPort
from .sequencing import RouteSequencerPort
from .transit import TransitRouterPort

__all__ = [
    # Upstream services
    "GeocoderPort",
    "PoiSearchPort",
    "TransitRouterPort",
    # Algorithms
    "RouteSequencerPort",
    # Cache
    "CachePort",
]
