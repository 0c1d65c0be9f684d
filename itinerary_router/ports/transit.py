"""Transit routing port - Public transport itineraries between two points."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import GeoPoint, TransitPlan


class TransitRouterPort(Protocol):
    """Port for transit routing.

    Implementation: adapters/amap/transit_adapter.py

    Cross-city trips need identifiers for both endpoints, hence the
    separate origin/destination codes.
    """

    def plan(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        origin_city_code: Optional[str] = None,
        destination_city_code: Optional[str] = None,
        origin_district_code: Optional[str] = None,
        destination_district_code: Optional[str] = None,
    ) -> List[TransitPlan]:
        """Request transit itineraries, best first.

        Returns:
            Itineraries (empty when the router has no plan).

        Raises:
            UpstreamError: If the service call fails.
        """
        ...

    def estimate_duration(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        city: Optional[str] = None,
    ) -> Optional[float]:
        """Duration in seconds of the best itinerary from the legacy endpoint.

        Raises:
            UpstreamError: If the service call fails.
        """
        ...
