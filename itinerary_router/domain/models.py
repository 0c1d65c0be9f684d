"""Immutable domain models for the itinerary router.

All models are frozen dataclasses with slots. Coordinates are kept in the
datum of the upstream mapping provider (GCJ-02 for AMap); see
``routing/coord_transform.py`` for conversions.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Union


# Directly-governed municipalities: their districts carry the province-level
# adcode prefix while the city field is often empty or a district name.
MUNICIPALITY_ADCODE_PREFIXES = {
    "北京": "11",
    "天津": "12",
    "上海": "31",
    "重庆": "50",
}


def city_adcode_prefix(code: str) -> str:
    """Adcode prefix shared by every district of the city ``code`` names.

    Usually the first 4 digits. A municipality's province-level code
    (e.g. '110000') covers districts '1101xx', so only 2 digits apply.
    """
    if code[2:] == "0000" and code[:2] in MUNICIPALITY_ADCODE_PREFIXES.values():
        return code[:2]
    return code[:4]


class TravelMode(str, Enum):
    """How a leg is travelled."""

    TRANSIT = "transit"
    WALK = "walk"


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A named point in the upstream provider's coordinate system."""

    name: str
    lng: float
    lat: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not (math.isfinite(self.lng) and math.isfinite(self.lat)):
            raise ValueError(f"Coordinates must be finite, got {self.lng},{self.lat}")
        if not -90 <= self.lat <= 90:
            raise ValueError(f"Latitude must be between -90 and 90, got {self.lat}")
        if not -180 <= self.lng <= 180:
            raise ValueError(
                f"Longitude must be between -180 and 180, got {self.lng}"
            )

    @property
    def location(self) -> str:
        """Coordinates in the ``"lng,lat"`` form used on the wire."""
        return f"{self.lng},{self.lat}"


@dataclass(frozen=True, slots=True)
class CityInfo:
    """City metadata recovered by reverse geocoding.

    Attributes:
        city_name: Human-readable city name
        city_code: Telephone-style city code (e.g. '028')
        district_code: 6-digit administrative code (adcode)
    """

    city_name: Optional[str] = None
    city_code: Optional[str] = None
    district_code: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ResolvedPlace(GeoPoint):
    """A geographic point with the provenance of its resolution.

    Attributes:
        formatted_address: Address returned by the upstream service
        city_name: City the point lies in
        city_code: Telephone-style city code
        district_code: 6-digit adcode; its first 4 digits identify the city
    """

    formatted_address: Optional[str] = None
    city_name: Optional[str] = None
    city_code: Optional[str] = None
    district_code: Optional[str] = None

    @property
    def city_info(self) -> CityInfo:
        return CityInfo(self.city_name, self.city_code, self.district_code)

    @property
    def has_city_info(self) -> bool:
        """Check if both codes needed for transit planning are known."""
        return bool(self.city_code) and bool(self.district_code)

    def with_name(self, name: str) -> ResolvedPlace:
        """Return a copy carrying a different display name."""
        return replace(self, name=name)

    def with_city_info(self, info: CityInfo) -> ResolvedPlace:
        """Return a copy with missing city metadata filled in from ``info``."""
        return replace(
            self,
            city_name=self.city_name or info.city_name,
            city_code=self.city_code or info.city_code,
            district_code=self.district_code or info.district_code,
        )


@dataclass(frozen=True, slots=True)
class CityConstraint:
    """Target city of a request.

    Attributes:
        query_city: Value passed to the upstream ``city`` scope parameter
        adcode_prefix: Adcode prefix of the city (4 digits, 2 for a
            municipality); when present it is the authoritative membership test
        city_hint: Human city name used for the looser name match
    """

    query_city: Optional[str] = None
    adcode_prefix: Optional[str] = None
    city_hint: Optional[str] = None

    @classmethod
    def from_hints(
        cls, city_hint: Optional[str] = None, city_code: Optional[str] = None
    ) -> CityConstraint:
        """Derive the constraint from a city name and/or an adcode."""
        hint = (city_hint or "").strip() or None
        code = (city_code or "").strip() or None
        return cls(
            query_city=code or hint,
            adcode_prefix=city_adcode_prefix(code) if code else None,
            city_hint=hint,
        )

    @property
    def label(self) -> str:
        """Human-readable label for messages."""
        return self.city_hint or self.query_city or "目标城市"


@dataclass(frozen=True, slots=True)
class PoiCandidate:
    """A keyword-search hit with the fields used for scoring."""

    place: ResolvedPlace
    address: str = ""
    type_tag: str = ""
    phone: str = ""
    weight: float = 0.0
    rating: float = 0.0

    @property
    def name(self) -> str:
        return self.place.name


@dataclass(frozen=True, slots=True)
class TransitSegment:
    """One piece of a transit itinerary.

    Attributes:
        kind: 'walking', 'bus', 'railway' or 'taxi'
        distance_m: Segment distance if reported
        duration_s: Segment duration if reported
        name: Line name for bus and rail segments
    """

    kind: str
    distance_m: Optional[float] = None
    duration_s: Optional[float] = None
    name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class TransitPlan:
    """A single transit itinerary as returned by the router.

    Aggregates may be missing; see ``LegResolver`` for how they are
    recovered from the segments.
    """

    distance_m: Optional[float] = None
    duration_s: Optional[float] = None
    cost: Optional[float] = None
    segments: tuple[TransitSegment, ...] = field(default_factory=tuple)

    def summed(self, attribute: str) -> Optional[float]:
        """Sum ``attribute`` over the segments that report it."""
        values = [
            getattr(segment, attribute)
            for segment in self.segments
            if getattr(segment, attribute) is not None
        ]
        return sum(values) if values else None


@dataclass(frozen=True, slots=True)
class Leg:
    """A point-to-point hop of the itinerary."""

    from_place: ResolvedPlace
    to_place: ResolvedPlace
    mode: TravelMode
    distance_m: Optional[float] = None
    duration_s: Optional[float] = None
    cost: Optional[float] = None
    note: Optional[str] = None
    segments: tuple[TransitSegment, ...] = field(default_factory=tuple)

    @property
    def is_fallback(self) -> bool:
        return self.mode is TravelMode.WALK


@dataclass(frozen=True, slots=True)
class FailedPlace:
    """A requested place that could not be resolved.

    Attributes:
        name: The name as typed by the caller
        reason: Machine-readable reason ('NotFoundInCity', 'Timeout')
        detail: Human-readable explanation
    """

    name: str
    reason: str
    detail: str = ""


@dataclass(frozen=True, slots=True)
class CoordinateOrigin:
    """Origin given as explicit coordinates."""

    lng: float
    lat: float
    name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class TextOrigin:
    """Origin given as free text, resolved like any other place."""

    text: str


OriginInput = Union[CoordinateOrigin, TextOrigin]


@dataclass(frozen=True, slots=True)
class ItineraryResult:
    """Outcome of a planning request.

    ``legs[i].to_place`` is ``ordered_places[i]``; ``legs[0].from_place`` is
    the origin and ``legs[i].from_place`` is ``ordered_places[i - 1]``.
    Leg endpoints may carry extra city metadata recovered while planning
    the leg.
    """

    origin: ResolvedPlace
    ordered_places: tuple[ResolvedPlace, ...]
    legs: tuple[Leg, ...]
    failed: tuple[FailedPlace, ...] = field(default_factory=tuple)

    @property
    def has_failures(self) -> bool:
        return len(self.failed) > 0

    @property
    def total_distance_m(self) -> float:
        return sum(leg.distance_m or 0.0 for leg in self.legs)

    @property
    def total_duration_s(self) -> float:
        return sum(leg.duration_s or 0.0 for leg in self.legs)

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-serialisable representation."""
        return {
            "origin": _place_dict(self.origin),
            "orderedPlaces": [_place_dict(p) for p in self.ordered_places],
            "legs": [
                {
                    "from": _place_dict(leg.from_place),
                    "to": _place_dict(leg.to_place),
                    "mode": leg.mode.value,
                    "distanceM": leg.distance_m,
                    "durationS": leg.duration_s,
                    "cost": leg.cost,
                    "note": leg.note,
                }
                for leg in self.legs
            ],
            "failed": [
                {"name": f.name, "reason": f.reason, "detail": f.detail}
                for f in self.failed
            ],
        }


def _place_dict(place: ResolvedPlace) -> dict[str, Any]:
    return {
        "name": place.name,
        "lng": place.lng,
        "lat": place.lat,
        "formattedAddress": place.formatted_address,
        "cityName": place.city_name,
        "cityCode": place.city_code,
        "districtCode": place.district_code,
    }
