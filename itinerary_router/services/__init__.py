"""Services layer - Application orchestration.

This module contains the services that drive the upstream adapters to
plan an itinerary.

Available services:
- ItineraryPlanner: Main orchestrator (origin, places, order, legs)
- PlaceResolver: City-scoped place name resolution
- LegResolver: Transit leg with walking fallback
"""

from .city_filter import is_in_city
from .itinerary_planner import ItineraryPlanner
from .leg_resolver import LegResolver
from .place_resolver import PlaceResolver, score_poi

__all__ = [
    "ItineraryPlanner",
    "PlaceResolver",
    "LegResolver",
    "is_in_city",
    "score_poi",
]
