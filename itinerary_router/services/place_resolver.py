"""Place resolver - Free-text place name to a point inside the target city."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..domain.errors import NotFoundInCityError, UpstreamError
from ..domain.models import CityConstraint, PoiCandidate, ResolvedPlace
from ..ports.geocoding import GeocoderPort
from ..ports.poi import PoiSearchPort
from .city_filter import is_in_city


def score_poi(query: str, candidate: PoiCandidate) -> float:
    """How much a POI looks like the place the user typed.

    Name matches dominate; address, category, phone, popularity and
    rating only break near-ties. Bonuses add up.
    """
    q = query.strip()
    name = candidate.name
    score = 0.0

    if name == q:
        score += 100
    if q in name:
        score += 60
    if name in q and len(name) >= 2:
        score += 20

    if q in candidate.address:
        score += 15
    if candidate.type_tag:
        score += 5

    if candidate.phone:
        score += 2
    if candidate.weight:
        score += min(10.0, candidate.weight / 10)
    if candidate.rating:
        score += min(10.0, candidate.rating)

    return score


@dataclass
class PlaceResolver:
    """Resolves names with an address lookup, then a keyword search.

    Both lookups are scoped to the target city and every candidate is
    checked with ``is_in_city``. There is no nationwide fallback: a
    same-named place in another city is never substituted.

    Attributes:
        geocoder: Address lookup service
        poi_search: Keyword search service
    """

    geocoder: GeocoderPort
    poi_search: PoiSearchPort

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def resolve(self, constraint: CityConstraint, query: str) -> ResolvedPlace:
        """Resolve ``query`` to a point inside ``constraint``'s city.

        Args:
            constraint: Target city.
            query: Place name as typed by the user.

        Returns:
            The resolved place, named after ``query``.

        Raises:
            NotFoundInCityError: If neither lookup yields an in-city match.
        """
        place = self._from_address_lookup(constraint, query)
        source = "geocode"
        if place is None:
            place = self._from_keyword_search(constraint, query)
            source = "poi"

        if place is None:
            self._logger.info(
                "Place not found in city",
                extra={"query": query, "city": constraint.label},
            )
            raise NotFoundInCityError(
                f"在 {constraint.label} 未找到该地点，请核对名称",
                query=query,
                city=constraint.label,
            )

        self._logger.debug(
            "Place resolved",
            extra={
                "query": query,
                "source": source,
                "adcode": place.district_code,
                "location": place.location,
            },
        )
        return place.with_name(query)

    def _from_address_lookup(
        self, constraint: CityConstraint, query: str
    ) -> Optional[ResolvedPlace]:
        try:
            candidates = self.geocoder.geocode(query, city=constraint.query_city)
        except UpstreamError as e:
            self._logger.warning(
                "Address lookup failed, trying keyword search",
                extra={"query": query, "error": str(e)},
            )
            return None

        for candidate in candidates:
            if is_in_city(
                constraint,
                district_code=candidate.district_code,
                city_name=candidate.city_name,
                address=candidate.formatted_address,
            ):
                return candidate
        return None

    def _from_keyword_search(
        self, constraint: CityConstraint, query: str
    ) -> Optional[ResolvedPlace]:
        try:
            candidates = self.poi_search.search(
                query, city=constraint.query_city, city_limit=True
            )
        except UpstreamError as e:
            self._logger.warning(
                "Keyword search failed",
                extra={"query": query, "error": str(e)},
            )
            return None

        # POIs are matched on adcode and city name only.
        in_city = [
            c
            for c in candidates
            if is_in_city(
                constraint,
                district_code=c.place.district_code,
                city_name=c.place.city_name,
            )
        ]
        if not in_city:
            return None

        # sorted() is stable, so equal scores keep the upstream order.
        best = sorted(in_city, key=lambda c: score_poi(query, c), reverse=True)[0]
        return best.place
