"""AMap geocoding and POI search adapter.

Implements GeocoderPort and PoiSearchPort on top of the geopy-based
``AMap`` client:
- lazy client construction from configuration
- AMap payload quirks mapped onto domain models
- geopy errors translated into UpstreamError
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from geopy.exc import GeopyError
from geopy.location import Location

from ...config import AmapConfig, get_config
from ...domain.errors import UpstreamError
from ...domain.models import CityInfo, GeoPoint, PoiCandidate, ResolvedPlace
from .client import AMap, create_client, number_field, text_field


def _city_name(raw: Dict[str, Any], *keys: str) -> Optional[str]:
    # Municipalities report an empty city; the province then names the city.
    for key in keys:
        value = text_field(raw.get(key))
        if value:
            return value
    return text_field(raw.get("province"))


@dataclass
class AmapGeocoderAdapter:
    """AMap adapter for address lookup, reverse lookup and keyword search.

    Attributes:
        config: AMap configuration
        client: Optional pre-built client (built from config on first use)
    """

    config: AmapConfig = field(default_factory=lambda: get_config().amap)
    client: Optional[AMap] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _get_client(self) -> AMap:
        if self.client is None:
            self._logger.debug(
                "Initializing AMap client",
                extra={"domain": self.config.domain, "timeout": self.config.timeout_seconds},
            )
            self.client = create_client(self.config)
        return self.client

    def geocode(self, address: str, city: Optional[str] = None) -> List[ResolvedPlace]:
        """Look up an address; candidates keep the upstream order."""
        if not address or not address.strip():
            return []

        try:
            locations = self._get_client().geocode(address, city=city, exactly_one=False)
        except GeopyError as e:
            self._logger.warning(
                "Geocode service error",
                extra={"query": address, "city": city, "error": str(e)},
            )
            raise UpstreamError("Geocode failed", cause=e, service="geocode") from e

        places = [self._to_place(address, loc) for loc in locations or []]
        self._logger.debug(
            "Geocode candidates",
            extra={"query": address, "city": city, "count": len(places)},
        )
        return places

    def reverse_geocode(self, point: GeoPoint) -> Optional[CityInfo]:
        """Return the city metadata of a point, or None if unknown."""
        try:
            location = self._get_client().reverse((point.lat, point.lng))
        except GeopyError as e:
            self._logger.warning(
                "Reverse geocode failed",
                extra={"lat": point.lat, "lng": point.lng, "error": str(e)},
            )
            raise UpstreamError("Reverse geocode failed", cause=e, service="regeo") from e

        if location is None:
            return None

        component = location.raw.get("addressComponent")
        if not isinstance(component, dict):
            return None

        return CityInfo(
            city_name=_city_name(component, "city"),
            city_code=text_field(component.get("citycode")),
            district_code=text_field(component.get("adcode")),
        )

    def search(
        self,
        keywords: str,
        city: Optional[str] = None,
        city_limit: bool = True,
    ) -> List[PoiCandidate]:
        """Keyword search; candidates keep the upstream order."""
        if not keywords or not keywords.strip():
            return []

        try:
            locations = self._get_client().search_text(
                keywords,
                city=city,
                city_limit=city_limit,
                page_size=self.config.poi_page_size,
            )
        except GeopyError as e:
            self._logger.warning(
                "POI search service error",
                extra={"query": keywords, "city": city, "error": str(e)},
            )
            raise UpstreamError("POI search failed", cause=e, service="place/text") from e

        return [self._to_candidate(keywords, loc) for loc in locations]

    @staticmethod
    def _to_place(query: str, location: Location) -> ResolvedPlace:
        raw = location.raw
        return ResolvedPlace(
            name=query,
            lng=float(location.longitude),
            lat=float(location.latitude),
            formatted_address=text_field(raw.get("formatted_address")),
            city_name=_city_name(raw, "city", "cityname"),
            city_code=text_field(raw.get("citycode")),
            district_code=text_field(raw.get("adcode")),
        )

    @staticmethod
    def _to_candidate(query: str, location: Location) -> PoiCandidate:
        raw = location.raw
        biz_ext = raw.get("biz_ext")
        rating = number_field(biz_ext.get("rating")) if isinstance(biz_ext, dict) else None
        address = text_field(raw.get("address")) or ""
        place = ResolvedPlace(
            name=text_field(raw.get("name")) or query,
            lng=float(location.longitude),
            lat=float(location.latitude),
            formatted_address=address,
            city_name=_city_name(raw, "cityname"),
            city_code=text_field(raw.get("citycode")),
            district_code=text_field(raw.get("adcode")),
        )
        return PoiCandidate(
            place=place,
            address=address,
            type_tag=text_field(raw.get("type")) or "",
            phone=text_field(raw.get("tel")) or "",
            weight=number_field(raw.get("weight")) or 0.0,
            rating=rating or 0.0,
        )
