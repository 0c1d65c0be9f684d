"""POI search port - Keyword search for points of interest."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import PoiCandidate


class PoiSearchPort(Protocol):
    """Port for keyword / POI search.

    Implementation: adapters/amap/geocoder_adapter.py
    """

    def search(
        self,
        keywords: str,
        city: Optional[str] = None,
        city_limit: bool = True,
    ) -> List[PoiCandidate]:
        """Search points of interest by keyword.

        Args:
            keywords: Search text.
            city: City name or adcode used to scope the search.
            city_limit: Ask the upstream to drop results outside ``city``.

        Returns:
            Candidates in upstream order (possibly empty).

        Raises:
            UpstreamError: If the service call fails.
        """
        ...
