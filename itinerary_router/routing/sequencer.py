"""Visiting-order heuristics for a fixed origin and a set of stops.

The order is built in three steps:

1. a two-way split of the stops (bounded k-means with k=2, seeded by the
   farthest pair) so elongated or bimodal layouts are swept one side at
   a time,
2. nearest-neighbour construction inside each group, the group closest
   to the origin first,
3. a bounded 2-opt pass over the open path that starts at the origin.

Small inputs skip straight to nearest-neighbour. Every function returns
the very objects it was given, reordered; nothing is copied or dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple, TypeVar

from ..config import PlannerConfig, get_config
from ..domain.models import GeoPoint
from .geometry import distance_m, path_length_m

P = TypeVar("P", bound=GeoPoint)


def nearest_neighbor_order(start: GeoPoint, points: Sequence[P]) -> List[P]:
    """Greedy order: repeatedly visit the closest remaining point.

    Ties go to the point listed first.
    """
    remaining = list(points)
    ordered: List[P] = []
    current = start

    while remaining:
        best_idx = 0
        best_distance = float("inf")
        for i, candidate in enumerate(remaining):
            d = distance_m(current, candidate)
            if d < best_distance:
                best_distance = d
                best_idx = i
        current = remaining.pop(best_idx)
        ordered.append(current)

    return ordered


def _centroid(group: Sequence[GeoPoint]) -> GeoPoint:
    lng = sum(p.lng for p in group) / len(group)
    lat = sum(p.lat for p in group) / len(group)
    return GeoPoint(name="centroid", lng=lng, lat=lat)


def split_two_ways(
    points: Sequence[P], iterations: int = 8
) -> Tuple[List[P], List[P]]:
    """Split points into two spatial groups.

    The farthest pair seeds the groups; each point joins the nearer seed
    (the first group on ties), seeds move to their group centroid, and the
    assignment is repeated a fixed number of times.

    Returns:
        The two groups. The second one is empty for fewer than 3 points.
    """
    if len(points) <= 2:
        return list(points), []

    seed_a: GeoPoint = points[0]
    seed_b: GeoPoint = points[1]
    farthest = -1.0
    for i in range(len(points)):
        for j in range(i + 1, len(points)):
            d = distance_m(points[i], points[j])
            if d > farthest:
                farthest = d
                seed_a, seed_b = points[i], points[j]

    group_a: List[P] = []
    group_b: List[P] = []
    for _ in range(iterations):
        group_a, group_b = [], []
        for p in points:
            if distance_m(p, seed_a) <= distance_m(p, seed_b):
                group_a.append(p)
            else:
                group_b.append(p)
        if group_a:
            seed_a = _centroid(group_a)
        if group_b:
            seed_b = _centroid(group_b)

    return group_a, group_b


def two_opt(
    origin: GeoPoint,
    route: Sequence[P],
    max_passes: int = 50,
    epsilon_m: float = 1e-6,
) -> List[P]:
    """Improve an open path ``[origin, *route]`` with segment reversals.

    A reversal of ``path[i..k]`` is kept when it shortens the path by more
    than ``epsilon_m``. Full passes repeat until one finds no improvement
    or ``max_passes`` is reached. The origin never moves.
    """
    path: List[GeoPoint] = [origin, *route]
    n = len(path)

    passes = 0
    improved = True
    while improved and passes < max_passes:
        improved = False
        passes += 1
        for i in range(1, n - 1):
            for k in range(i + 1, n):
                removed = distance_m(path[i - 1], path[i])
                added = distance_m(path[i - 1], path[k])
                if k + 1 < n:
                    removed += distance_m(path[k], path[k + 1])
                    added += distance_m(path[i], path[k + 1])
                if added + epsilon_m < removed:
                    path[i : k + 1] = reversed(path[i : k + 1])
                    improved = True

    return path[1:]  # type: ignore[return-value]


@dataclass
class ClusteredRouteSequencer:
    """Route sequencer combining split, nearest-neighbour and 2-opt.

    This class implements RouteSequencerPort. It is CPU-only and holds no
    per-request state, so one instance can serve concurrent requests.
    """

    config: PlannerConfig = field(default_factory=lambda: get_config().planner)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def sequence(self, origin: GeoPoint, points: Sequence[P]) -> List[P]:
        """Order ``points`` into a short open tour starting at ``origin``.

        Args:
            origin: Fixed starting point, not part of the result.
            points: Stops to visit.

        Returns:
            A permutation of ``points``.
        """
        if len(points) <= self.config.nn_only_max_points:
            return nearest_neighbor_order(origin, points)

        group_a, group_b = split_two_ways(points, self.config.split_iterations)
        if not group_b:
            return nearest_neighbor_order(origin, group_a)

        def closest_to_origin(group: Sequence[P]) -> float:
            return min(distance_m(origin, p) for p in group)

        if closest_to_origin(group_a) <= closest_to_origin(group_b):
            first, second = group_a, group_b
        else:
            first, second = group_b, group_a

        first_ordered = nearest_neighbor_order(origin, first)
        second_start = first_ordered[-1] if first_ordered else origin
        merged = first_ordered + nearest_neighbor_order(second_start, second)

        refined = two_opt(
            origin,
            merged,
            max_passes=self.config.two_opt_max_passes,
            epsilon_m=self.config.two_opt_epsilon_m,
        )

        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(
                "Sequenced stops",
                extra={
                    "stops": len(points),
                    "first_group": len(first),
                    "second_group": len(second),
                    "merged_length_m": round(path_length_m([origin, *merged]), 1),
                    "refined_length_m": round(path_length_m([origin, *refined]), 1),
                },
            )

        return refined
