"""Leg resolver - Transit plan or walking estimate for one hop."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..config import PlannerConfig, get_config
from ..domain.errors import ItineraryRouterError
from ..domain.models import Leg, ResolvedPlace, TransitPlan, TravelMode
from ..ports.geocoding import GeocoderPort
from ..ports.transit import TransitRouterPort
from ..routing.geometry import distance_m

WALK_FALLBACK_NOTE = "no transit plans; fallback to walk-only"


@dataclass
class LegResolver:
    """Resolves a leg by transit, falling back to walking.

    ``resolve_leg`` never raises for upstream trouble: every failure ends
    in a walking leg. At most four upstream calls are made per leg (two
    reverse lookups, the transit request and a duration lookup).

    Attributes:
        geocoder: Used for best-effort reverse lookups of city metadata
        transit_router: Transit routing service
        config: Planner configuration (walking speed)
    """

    geocoder: GeocoderPort
    transit_router: TransitRouterPort
    config: PlannerConfig = field(default_factory=lambda: get_config().planner)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def enrich(self, place: ResolvedPlace) -> ResolvedPlace:
        """Fill in missing city metadata by reverse lookup, best effort."""
        if place.has_city_info:
            return place
        try:
            info = self.geocoder.reverse_geocode(place)
        except ItineraryRouterError as e:
            self._logger.debug(
                "Reverse lookup skipped",
                extra={"place": place.name, "error": str(e)},
            )
            return place
        if info is None:
            return place
        return place.with_city_info(info)

    def resolve_leg(
        self,
        city_fallback: Optional[str],
        from_place: ResolvedPlace,
        to_place: ResolvedPlace,
    ) -> Leg:
        """Resolve the hop from ``from_place`` to ``to_place``.

        Args:
            city_fallback: Request-wide adcode used when an endpoint's own
                adcode is unknown.
            from_place: Departure point.
            to_place: Arrival point.

        Returns:
            A transit leg built from the best itinerary, or a walking leg.
        """
        from_place = self.enrich(from_place)
        to_place = self.enrich(to_place)

        try:
            plans = self.transit_router.plan(
                from_place,
                to_place,
                origin_city_code=from_place.city_code,
                destination_city_code=to_place.city_code,
                origin_district_code=from_place.district_code or city_fallback,
                destination_district_code=to_place.district_code or city_fallback,
            )
        except ItineraryRouterError as e:
            self._logger.warning(
                "Transit planning failed, walking instead",
                extra={"from": from_place.name, "to": to_place.name, "error": str(e)},
            )
            plans = []

        if plans:
            return self._transit_leg(from_place, to_place, plans[0])
        return self.walking_leg(from_place, to_place)

    def _transit_leg(
        self, from_place: ResolvedPlace, to_place: ResolvedPlace, best: TransitPlan
    ) -> Leg:
        distance = best.distance_m
        if distance is None:
            distance = best.summed("distance_m")

        duration = best.duration_s
        if duration is None:
            duration = best.summed("duration_s")
        if duration is None:
            duration = self._legacy_duration(from_place, to_place)

        return Leg(
            from_place=from_place,
            to_place=to_place,
            mode=TravelMode.TRANSIT,
            distance_m=distance,
            duration_s=duration,
            cost=best.cost,
            segments=best.segments,
        )

    def _legacy_duration(
        self, from_place: ResolvedPlace, to_place: ResolvedPlace
    ) -> Optional[float]:
        city = (
            from_place.city_code
            or from_place.city_name
            or to_place.city_code
            or to_place.city_name
        )
        try:
            return self.transit_router.estimate_duration(from_place, to_place, city=city)
        except ItineraryRouterError as e:
            self._logger.debug(
                "Legacy duration lookup failed",
                extra={"from": from_place.name, "to": to_place.name, "error": str(e)},
            )
            return None

    def walking_leg(
        self,
        from_place: ResolvedPlace,
        to_place: ResolvedPlace,
        note: str = WALK_FALLBACK_NOTE,
    ) -> Leg:
        """Straight-line walking estimate between two places."""
        distance = round(distance_m(from_place, to_place))
        duration = round(distance / self.config.walking_speed_mps)
        return Leg(
            from_place=from_place,
            to_place=to_place,
            mode=TravelMode.WALK,
            distance_m=float(distance),
            duration_s=float(duration),
            note=note,
        )
