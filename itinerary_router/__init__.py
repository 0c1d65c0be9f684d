"""Itinerary router - multi-stop public transit itineraries inside one city.

Resolves free-text place names against the AMap web services, orders the
stops into a short open tour and fills every hop with a transit plan or a
walking estimate.

    from itinerary_router import CoordinateOrigin, get_container
    from itinerary_router.services import ItineraryPlanner

    planner = get_container().resolve(ItineraryPlanner)
    result = planner.plan_itinerary(
        CoordinateOrigin(lng=104.06, lat=30.67),
        ["宽窄巷子", "武侯祠"],
        city_hint="成都",
    )
"""

from .container import Container, get_container, reset_container
from .domain import CoordinateOrigin, ItineraryResult, TextOrigin

__version__ = "0.1.0"

__all__ = [
    "Container",
    "get_container",
    "reset_container",
    "CoordinateOrigin",
    "TextOrigin",
    "ItineraryResult",
    "__version__",
]
