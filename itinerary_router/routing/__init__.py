"""Pure geometry and ordering algorithms (no I/O)."""

from .coord_transform import gcj02_to_wgs84, wgs84_to_gcj02
from .geometry import distance_m, path_length_m
from .sequencer import (
    ClusteredRouteSequencer,
    nearest_neighbor_order,
    split_two_ways,
    two_opt,
)

__all__ = [
    "distance_m",
    "path_length_m",
    "nearest_neighbor_order",
    "split_two_ways",
    "two_opt",
    "ClusteredRouteSequencer",
    "gcj02_to_wgs84",
    "wgs84_to_gcj02",
]
