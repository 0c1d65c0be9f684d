import pytest

from itinerary_router.domain.models import GeoPoint
from itinerary_router.routing.geometry import distance_m, path_length_m

# One degree of latitude on a 6371 km sphere.
METERS_PER_DEGREE = 111194.92664455873


def test_distance_same_point_is_zero():
    p = GeoPoint("p", 104.06, 30.67)
    assert distance_m(p, p) == 0.0


def test_distance_is_symmetric():
    a = GeoPoint("a", 104.06, 30.67)
    b = GeoPoint("b", 104.08, 30.66)
    assert distance_m(a, b) == pytest.approx(distance_m(b, a))


def test_distance_along_meridian_uses_6371_km_sphere():
    a = GeoPoint("a", 104.0, 30.0)
    b = GeoPoint("b", 104.0, 30.0 + 1300 / METERS_PER_DEGREE)
    assert distance_m(a, b) == pytest.approx(1300.0, abs=1e-3)


def test_distance_chengdu_to_beijing_order_of_magnitude():
    chengdu = GeoPoint("成都", 104.06, 30.67)
    beijing = GeoPoint("北京", 116.40, 39.90)
    assert 1_400_000 < distance_m(chengdu, beijing) < 1_700_000


def test_path_length_sums_hops():
    a = GeoPoint("a", 104.0, 30.00)
    b = GeoPoint("b", 104.0, 30.01)
    c = GeoPoint("c", 104.0, 30.03)
    assert path_length_m([a, b, c]) == pytest.approx(distance_m(a, c))
    assert path_length_m([a]) == 0
    assert path_length_m([]) == 0
