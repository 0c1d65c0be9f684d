"""Itinerary planner - Main orchestrator.

Runs the four planning phases, each a barrier for the next:

1. RESOLVE_ORIGIN: city code auto-lookup, then the origin itself
2. RESOLVE_PLACES: every place name in parallel; failures are collected
3. SEQUENCE: visiting order of the resolved places (CPU only)
4. RESOLVE_LEGS: every consecutive hop in parallel

Fan-out uses a thread pool; results are written back by index so the
output order never depends on completion order. A per-request deadline
turns pending place resolutions into failures and pending legs into
walking estimates.
"""

from __future__ import annotations

import logging
import math
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, TypeVar

from ..adapters.cache.null_cache import NullCache
from ..config import PlannerConfig, get_config
from ..domain.errors import (
    InvalidOriginError,
    InvalidRequestError,
    ItineraryRouterError,
    NoPlacesResolvedError,
    NotFoundInCityError,
)
from ..domain.models import (
    CityConstraint,
    CoordinateOrigin,
    FailedPlace,
    ItineraryResult,
    Leg,
    OriginInput,
    ResolvedPlace,
    TextOrigin,
)
from ..ports.cache import CachePort
from ..ports.geocoding import GeocoderPort
from ..ports.sequencing import RouteSequencerPort
from .leg_resolver import LegResolver
from .place_resolver import PlaceResolver

T = TypeVar("T")

TIMEOUT_REASON = "Timeout"
LEG_TIMEOUT_NOTE = "transit lookup timed out; fallback to walk-only"


@dataclass
class ItineraryPlanner:
    """Plans a multi-stop itinerary inside one city.

    Attributes:
        place_resolver: Resolves names to in-city points
        leg_resolver: Resolves each hop to a transit or walking leg
        sequencer: Orders the resolved places
        geocoder: Used to derive an adcode from a bare city name
        city_code_cache: Cache for city name -> adcode lookups
        config: Planner configuration
    """

    place_resolver: PlaceResolver
    leg_resolver: LegResolver
    sequencer: RouteSequencerPort
    geocoder: GeocoderPort
    city_code_cache: CachePort[str] = field(default_factory=NullCache)
    config: PlannerConfig = field(default_factory=lambda: get_config().planner)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def plan_itinerary(
        self,
        origin: OriginInput,
        place_names: Sequence[str],
        city_hint: Optional[str] = None,
        city_code: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ) -> ItineraryResult:
        """Plan an itinerary from ``origin`` through every named place.

        Args:
            origin: Explicit coordinates or free text.
            place_names: Places to visit, as typed by the user.
            city_hint: Human-readable target city (e.g. '成都').
            city_code: Authoritative 6-digit adcode of the target city.
            timeout_seconds: Overrides the configured request deadline.

        Returns:
            The itinerary; ``failed`` lists places that could not be resolved.

        Raises:
            InvalidRequestError: If no place names are given.
            InvalidOriginError: If the origin is malformed or unresolvable.
            NoPlacesResolvedError: If no place could be resolved.
        """
        # Names are echoed back as typed; only the lookup sees them stripped.
        names = [name for name in place_names if name and name.strip()]
        if not names:
            raise InvalidRequestError("origin and places[] are required")
        self._validate_origin(origin)

        timeout = (
            timeout_seconds
            if timeout_seconds is not None
            else self.config.request_timeout_seconds
        )
        deadline = time.monotonic() + timeout

        def remaining() -> float:
            return max(0.0, deadline - time.monotonic())

        self._logger.info(
            "Planning itinerary",
            extra={"places": len(names), "city_hint": city_hint, "city_code": city_code},
        )

        pool = ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="itinerary"
        )
        try:
            # RESOLVE_ORIGIN
            code_future: Optional[Future[Optional[str]]] = None
            if not (city_code or "").strip() and (city_hint or "").strip():
                code_future = pool.submit(self.lookup_city_code, city_hint or "")

            origin_place: Optional[ResolvedPlace] = None
            if isinstance(origin, CoordinateOrigin):
                origin_place = ResolvedPlace(
                    name=origin.name or self.config.default_origin_name,
                    lng=float(origin.lng),
                    lat=float(origin.lat),
                )

            if code_future is not None:
                city_code = self._await(code_future, remaining(), default=None)
                if city_code:
                    self._logger.info(
                        "City code derived from hint",
                        extra={"city_hint": city_hint, "city_code": city_code},
                    )

            constraint = CityConstraint.from_hints(city_hint, city_code)

            if origin_place is None:
                origin_place = self._resolve_text_origin(
                    pool, constraint, origin, remaining()
                )

            # RESOLVE_PLACES
            resolved, failed = self._resolve_places(pool, constraint, names, remaining())
            self._logger.info(
                "Places resolved",
                extra={"resolved": len(resolved), "failed": len(failed)},
            )
            if not resolved:
                raise NoPlacesResolvedError(
                    "No places found in target city. Please be more specific.",
                    failed=tuple(failed),
                )

            # SEQUENCE
            ordered = self.sequencer.sequence(origin_place, resolved)

            # RESOLVE_LEGS
            legs = self._resolve_legs(
                pool, city_code, origin_place, ordered, remaining()
            )
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

        result = self._assemble(origin_place, legs, failed)
        self._logger.info(
            "Itinerary planned",
            extra={
                "stops": len(result.ordered_places),
                "walk_legs": sum(1 for leg in result.legs if leg.is_fallback),
                "distance_m": round(result.total_distance_m),
            },
        )
        return result

    def lookup_city_code(self, city_hint: str) -> Optional[str]:
        """Derive the adcode of a city from its name (cached).

        Returns:
            The adcode, or None if the lookup fails.
        """
        hint = city_hint.strip()
        if not hint:
            return None
        return self.city_code_cache.get_or_compute(
            f"adcode:{hint}", lambda: self._fetch_city_code(hint)
        )

    def _fetch_city_code(self, hint: str) -> Optional[str]:
        try:
            candidates = self.geocoder.geocode(hint)
        except ItineraryRouterError as e:
            self._logger.warning(
                "City code lookup failed",
                extra={"city_hint": hint, "error": str(e)},
            )
            return None
        for candidate in candidates:
            if candidate.district_code:
                return candidate.district_code
        return None

    def _validate_origin(self, origin: OriginInput) -> None:
        if isinstance(origin, CoordinateOrigin):
            try:
                lng, lat = float(origin.lng), float(origin.lat)
            except (TypeError, ValueError) as e:
                raise InvalidOriginError(
                    "Origin coordinates must be numbers", cause=e, origin=repr(origin)
                ) from e
            if not (math.isfinite(lng) and math.isfinite(lat)):
                raise InvalidOriginError(
                    "Origin coordinates must be finite", origin=f"{lng},{lat}"
                )
            if not (-180 <= lng <= 180 and -90 <= lat <= 90):
                raise InvalidOriginError(
                    "Origin coordinates out of range", origin=f"{lng},{lat}"
                )
        elif isinstance(origin, TextOrigin):
            if not (origin.text or "").strip():
                raise InvalidOriginError("Origin text is empty", origin="")
        else:
            raise InvalidOriginError(
                f"Unsupported origin type: {type(origin).__name__}",
                origin=repr(origin),
            )

    def _resolve_text_origin(
        self,
        pool: ThreadPoolExecutor,
        constraint: CityConstraint,
        origin: OriginInput,
        timeout: float,
    ) -> ResolvedPlace:
        assert isinstance(origin, TextOrigin)
        text = origin.text.strip()
        future = pool.submit(self.place_resolver.resolve, constraint, text)
        done, _ = wait([future], timeout=timeout)
        if future not in done:
            future.cancel()
            raise InvalidOriginError(
                "Origin could not be resolved before the deadline", origin=text
            )
        try:
            return future.result()
        except NotFoundInCityError as e:
            raise InvalidOriginError(
                f"Origin not found: {e.message}", cause=e, origin=text
            ) from e

    def _resolve_places(
        self,
        pool: ThreadPoolExecutor,
        constraint: CityConstraint,
        names: List[str],
        timeout: float,
    ) -> tuple[List[ResolvedPlace], List[FailedPlace]]:
        futures = [
            pool.submit(self.place_resolver.resolve, constraint, name.strip())
            for name in names
        ]
        wait(futures, timeout=timeout)

        slots: List[Optional[ResolvedPlace]] = [None] * len(names)
        failed: List[FailedPlace] = []
        for i, (name, future) in enumerate(zip(names, futures)):
            if not future.done():
                future.cancel()
                self._logger.warning("Place resolution timed out", extra={"query": name})
                failed.append(
                    FailedPlace(name, TIMEOUT_REASON, "resolution did not finish in time")
                )
                continue
            error = future.exception()
            if isinstance(error, ItineraryRouterError):
                failed.append(FailedPlace(name, NotFoundInCityError.reason, error.message))
                continue
            slots[i] = future.result()

        return [place for place in slots if place is not None], failed

    def _resolve_legs(
        self,
        pool: ThreadPoolExecutor,
        city_code: Optional[str],
        origin: ResolvedPlace,
        ordered: List[ResolvedPlace],
        timeout: float,
    ) -> List[Leg]:
        city_fallback = (city_code or "").strip() or None
        pairs = list(zip([origin, *ordered[:-1]], ordered))
        futures = [
            pool.submit(self.leg_resolver.resolve_leg, city_fallback, from_place, to_place)
            for from_place, to_place in pairs
        ]
        wait(futures, timeout=timeout)

        legs: List[Leg] = []
        for (from_place, to_place), future in zip(pairs, futures):
            if not future.done():
                future.cancel()
                self._logger.warning(
                    "Leg resolution timed out",
                    extra={"from": from_place.name, "to": to_place.name},
                )
                legs.append(
                    self.leg_resolver.walking_leg(from_place, to_place, LEG_TIMEOUT_NOTE)
                )
                continue
            error = future.exception()
            if error is not None:
                # Same degradation as an upstream failure: never lose the leg.
                self._logger.error(
                    "Leg resolution crashed",
                    exc_info=error,
                    extra={"from": from_place.name, "to": to_place.name},
                )
                legs.append(self.leg_resolver.walking_leg(from_place, to_place))
                continue
            legs.append(future.result())
        return legs

    @staticmethod
    def _assemble(
        origin: ResolvedPlace, legs: List[Leg], failed: List[FailedPlace]
    ) -> ItineraryResult:
        # Legs may carry endpoints enriched with city metadata; merge those
        # back so each stop is one object shared by its two legs.
        stops = [origin, *(leg.to_place for leg in legs)]
        for i, leg in enumerate(legs):
            stops[i] = stops[i].with_city_info(leg.from_place.city_info)
        final_legs = tuple(
            replace(leg, from_place=stops[i], to_place=stops[i + 1])
            for i, leg in enumerate(legs)
        )
        return ItineraryResult(
            origin=stops[0],
            ordered_places=tuple(stops[1:]),
            legs=final_legs,
            failed=tuple(failed),
        )

    @staticmethod
    def _await(future: Future[T], timeout: float, default: T) -> T:
        done, _ = wait([future], timeout=timeout)
        if future not in done:
            future.cancel()
            return default
        return future.result()
