"""Geocoding port - Address lookup and reverse lookup.

This protocol defines the contract for geocoding services, allowing
different providers (AMap, test fakes) to be plugged in.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import CityInfo, GeoPoint, ResolvedPlace


class GeocoderPort(Protocol):
    """Port for geocoding services.

    Implementation: adapters/amap/geocoder_adapter.py
    """

    def geocode(self, address: str, city: Optional[str] = None) -> List[ResolvedPlace]:
        """Look up an address, optionally scoped to a city.

        Args:
            address: Free-text address or place name.
            city: City name or adcode used to scope the lookup.

        Returns:
            Candidates in upstream order (possibly empty).

        Raises:
            UpstreamError: If the service call fails.
        """
        ...

    def reverse_geocode(self, point: GeoPoint) -> Optional[CityInfo]:
        """Find the city a point lies in.

        Args:
            point: Coordinates to look up.

        Returns:
            City metadata, or None if the service knows nothing.

        Raises:
            UpstreamError: If the service call fails.
        """
        ...
