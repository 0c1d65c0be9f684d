"""AMap transit routing adapter.

Implements TransitRouterPort on the v5 integrated transit endpoint, with
the v3 endpoint used only to recover a duration estimate.

AMap moved several numbers between API versions (v5 nests durations and
fares under ``cost``; rail reports ``time``; taxi reports ``drivetime``),
so every field is looked up in each of its known places.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from geopy.exc import GeopyError

from ...config import AmapConfig, get_config
from ...domain.errors import UpstreamError
from ...domain.models import GeoPoint, TransitPlan, TransitSegment
from .client import AMap, create_client, number_field, text_field


def _duration(raw: Dict[str, Any]) -> Optional[float]:
    for key in ("duration", "time", "drivetime"):
        value = number_field(raw.get(key))
        if value is not None:
            return value
    cost = raw.get("cost")
    if isinstance(cost, dict):
        return number_field(cost.get("duration"))
    return None


def _fare(raw: Dict[str, Any]) -> Optional[float]:
    cost = raw.get("cost")
    if isinstance(cost, dict):
        return number_field(cost.get("transit_fee"))
    return number_field(cost)


def _segment(kind: str, raw: Any) -> Optional[TransitSegment]:
    if not isinstance(raw, dict) or not raw:
        return None
    segment = TransitSegment(
        kind=kind,
        distance_m=number_field(raw.get("distance")),
        duration_s=_duration(raw),
        name=text_field(raw.get("name")),
    )
    if segment.distance_m is None and segment.duration_s is None and segment.name is None:
        return None
    return segment


def _segments(raw_segments: Any) -> Iterator[TransitSegment]:
    if not isinstance(raw_segments, list):
        return
    for raw in raw_segments:
        if not isinstance(raw, dict):
            continue
        walking = _segment("walking", raw.get("walking"))
        if walking:
            yield walking
        bus = raw.get("bus")
        if isinstance(bus, dict) and isinstance(bus.get("buslines"), list):
            for line in bus["buslines"]:
                segment = _segment("bus", line)
                if segment:
                    yield segment
        for kind in ("railway", "taxi"):
            segment = _segment(kind, raw.get(kind))
            if segment:
                yield segment


def parse_transit(raw: Dict[str, Any]) -> TransitPlan:
    """Map one AMap transit object onto a TransitPlan."""
    return TransitPlan(
        distance_m=number_field(raw.get("distance")),
        duration_s=_duration(raw),
        cost=_fare(raw),
        segments=tuple(_segments(raw.get("segments"))),
    )


@dataclass
class AmapTransitAdapter:
    """Transit router backed by AMap.

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
            self.client = create_client(self.config)
        return self.client

    def plan(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        origin_city_code: Optional[str] = None,
        destination_city_code: Optional[str] = None,
        origin_district_code: Optional[str] = None,
        destination_district_code: Optional[str] = None,
    ) -> List[TransitPlan]:
        """Request transit itineraries, best first."""
        try:
            transits = self._get_client().transit(
                origin.location,
                destination.location,
                city1=origin_city_code,
                city2=destination_city_code,
                ad1=origin_district_code,
                ad2=destination_district_code,
            )
        except GeopyError as e:
            self._logger.warning(
                "Transit service error",
                extra={"from": origin.name, "to": destination.name, "error": str(e)},
            )
            raise UpstreamError("Transit routing failed", cause=e, service="transit") from e

        plans = [parse_transit(t) for t in transits]
        self._logger.debug(
            "Transit plans",
            extra={"from": origin.name, "to": destination.name, "count": len(plans)},
        )
        return plans

    def estimate_duration(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        city: Optional[str] = None,
    ) -> Optional[float]:
        """Duration of the best v3 itinerary in seconds, if any."""
        try:
            transits = self._get_client().transit_v3(
                origin.location, destination.location, city=city
            )
        except GeopyError as e:
            raise UpstreamError(
                "Transit duration lookup failed", cause=e, service="transit_v3"
            ) from e

        if not transits:
            return None
        return number_field(transits[0].get("duration"))
