from itinerary_router.config import PlannerConfig
from itinerary_router.domain.models import GeoPoint
from itinerary_router.routing.geometry import path_length_m
from itinerary_router.routing.sequencer import (
    ClusteredRouteSequencer,
    nearest_neighbor_order,
    split_two_ways,
    two_opt,
)

from fakes import make_place

ORIGIN = GeoPoint("origin", 104.0, 30.0)


def _line(*offsets):
    # Points due north of ORIGIN, so distances add up exactly.
    return [make_place(f"p{o}", 104.0, 30.0 + o / 100) for o in offsets]


def _scattered():
    coords = [
        (104.05, 30.66),
        (104.08, 30.62),
        (103.98, 30.70),
        (104.12, 30.69),
        (104.02, 30.58),
        (103.95, 30.63),
        (104.10, 30.55),
    ]
    return [make_place(f"s{i}", lng, lat) for i, (lng, lat) in enumerate(coords)]


def _ids(points):
    return [id(p) for p in points]


def test_nearest_neighbor_visits_closest_first():
    p1, p2, p3 = _line(1, 2, 3)
    assert nearest_neighbor_order(ORIGIN, [p3, p1, p2]) == [p1, p2, p3]


def test_nearest_neighbor_tie_goes_to_first_listed():
    # Offsets exact in binary so both points are equally far.
    east = make_place("east", 104.5, 30.0)
    west = make_place("west", 103.5, 30.0)
    assert nearest_neighbor_order(ORIGIN, [east, west])[0] is east
    assert nearest_neighbor_order(ORIGIN, [west, east])[0] is west


def test_split_two_ways_small_input_is_one_group():
    points = _line(1, 2)
    group_a, group_b = split_two_ways(points)
    assert group_a == points
    assert group_b == []


def test_split_two_ways_separates_clusters():
    west = [
        make_place("w1", 103.90, 30.60),
        make_place("w2", 103.91, 30.61),
        make_place("w3", 103.90, 30.62),
    ]
    east = [
        make_place("e1", 104.20, 30.60),
        make_place("e2", 104.21, 30.61),
        make_place("e3", 104.20, 30.62),
    ]
    group_a, group_b = split_two_ways(west + east)

    groups = {frozenset(p.name for p in group_a), frozenset(p.name for p in group_b)}
    assert groups == {frozenset({"w1", "w2", "w3"}), frozenset({"e1", "e2", "e3"})}


def test_two_opt_uncrosses_route():
    p1, p2, p3, p4 = _line(1, 2, 3, 4)
    assert two_opt(ORIGIN, [p2, p1, p3, p4]) == [p1, p2, p3, p4]


def test_two_opt_may_reverse_tail():
    p1, p2, p3 = _line(1, 2, 3)
    assert two_opt(ORIGIN, [p1, p3, p2]) == [p1, p2, p3]


def test_two_opt_never_lengthens_route():
    points = _scattered()
    route = nearest_neighbor_order(ORIGIN, points)
    improved = two_opt(ORIGIN, route)

    assert sorted(_ids(improved)) == sorted(_ids(route))
    assert path_length_m([ORIGIN, *improved]) <= path_length_m([ORIGIN, *route]) + 1e-6


def test_two_opt_empty_and_single():
    (p1,) = _line(1)
    assert two_opt(ORIGIN, []) == []
    assert two_opt(ORIGIN, [p1]) == [p1]


def test_sequence_is_permutation_of_the_same_objects():
    points = _scattered()
    ordered = ClusteredRouteSequencer(PlannerConfig()).sequence(ORIGIN, points)

    assert len(ordered) == len(points)
    assert sorted(_ids(ordered)) == sorted(_ids(points))


def test_sequence_degenerate_inputs():
    sequencer = ClusteredRouteSequencer(PlannerConfig())
    (p1,) = _line(1)

    assert sequencer.sequence(ORIGIN, []) == []
    assert sequencer.sequence(ORIGIN, [p1])[0] is p1


def test_sequence_small_input_is_nearest_neighbor():
    points = _line(3, 1, 2)
    sequencer = ClusteredRouteSequencer(PlannerConfig())
    assert sequencer.sequence(ORIGIN, points) == nearest_neighbor_order(ORIGIN, points)


def test_sequence_is_deterministic():
    points = _scattered()
    sequencer = ClusteredRouteSequencer(PlannerConfig())
    first = sequencer.sequence(ORIGIN, points)
    second = sequencer.sequence(ORIGIN, points)
    assert _ids(first) == _ids(second)


def test_sequence_sweeps_nearest_cluster_first():
    origin = GeoPoint("origin", 103.85, 30.61)
    west = [
        make_place("w1", 103.90, 30.60),
        make_place("w2", 103.91, 30.61),
        make_place("w3", 103.90, 30.62),
    ]
    east = [
        make_place("e1", 104.20, 30.60),
        make_place("e2", 104.21, 30.61),
        make_place("e3", 104.20, 30.62),
    ]
    ordered = ClusteredRouteSequencer(PlannerConfig()).sequence(origin, east + west)

    assert {p.name for p in ordered[:3]} == {"w1", "w2", "w3"}
    assert {p.name for p in ordered[3:]} == {"e1", "e2", "e3"}


def test_sequence_not_longer_than_nearest_neighbor_on_line():
    points = _line(5, 1, 4, 2, 3)
    ordered = ClusteredRouteSequencer(PlannerConfig()).sequence(ORIGIN, points)
    assert [p.name for p in ordered] == ["p1", "p2", "p3", "p4", "p5"]
