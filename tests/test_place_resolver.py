import pytest

from fakes import make_place, poi
from itinerary_router.domain.errors import NotFoundInCityError
from itinerary_router.domain.models import CityConstraint
from itinerary_router.services.place_resolver import PlaceResolver, score_poi

CHENGDU = CityConstraint.from_hints("成都", "510100")


@pytest.fixture
def resolver(geocoder, poi_search):
    return PlaceResolver(geocoder=geocoder, poi_search=poi_search)


def test_geocode_hit_named_after_query(resolver, geocoder, poi_search):
    geocoder.places["武侯祠"] = [
        make_place("四川省成都市武侯区武侯祠大街231号", 104.048, 30.646, adcode="510107", city="成都市")
    ]

    place = resolver.resolve(CHENGDU, "武侯祠")

    assert place.name == "武侯祠"
    assert (place.lng, place.lat) == (104.048, 30.646)
    assert place.district_code == "510107"
    assert geocoder.calls == [("武侯祠", "510100")]
    assert poi_search.calls == []


def test_geocode_skips_out_of_city_candidates(resolver, geocoder):
    geocoder.places["人民公园"] = [
        make_place("人民公园", 116.30, 39.90, adcode="110102", city="北京市"),
        make_place("人民公园", 104.056, 30.659, adcode="510105", city="成都市"),
    ]

    place = resolver.resolve(CHENGDU, "人民公园")

    assert place.district_code == "510105"


def test_no_cross_city_leak(resolver, geocoder, poi_search):
    geocoder.places["人民公园"] = [
        make_place("人民公园", 116.30, 39.90, adcode="110102", city="北京市")
    ]
    poi_search.results["人民公园"] = [
        poi("人民公园", 116.30, 39.90, adcode="110102", city="北京市")
    ]

    with pytest.raises(NotFoundInCityError) as exc_info:
        resolver.resolve(CHENGDU, "人民公园")

    assert exc_info.value.query == "人民公园"
    assert exc_info.value.reason == "NotFoundInCity"
    assert "成都" in exc_info.value.message


def test_keyword_search_used_when_geocode_misses(resolver, poi_search):
    poi_search.results["春熙路"] = [
        poi("春熙路步行街", 104.080, 30.655, adcode="510104", city="成都市", type_tag="风景名胜"),
        poi("春熙路", 104.081, 30.657, adcode="510104", city="成都市"),
    ]

    place = resolver.resolve(CHENGDU, "春熙路")

    assert (place.lng, place.lat) == (104.081, 30.657)
    assert place.name == "春熙路"
    assert poi_search.calls == [("春熙路", "510100", True)]


def test_keyword_search_tie_keeps_upstream_order(resolver, poi_search):
    poi_search.results["茶馆"] = [
        poi("茶馆", 104.01, 30.61, adcode="510104"),
        poi("茶馆", 104.02, 30.62, adcode="510105"),
    ]

    place = resolver.resolve(CHENGDU, "茶馆")

    assert place.district_code == "510104"


def test_keyword_search_filters_before_ranking(resolver, poi_search):
    poi_search.results["宽窄巷子"] = [
        poi("宽窄巷子", 116.40, 39.90, adcode="110101", city="北京市", rating=5.0),
        poi("宽窄巷子景区", 104.05, 30.66, adcode="510105", city="成都市"),
    ]

    place = resolver.resolve(CHENGDU, "宽窄巷子")

    assert place.district_code == "510105"


def test_upstream_errors_become_not_found(resolver, geocoder, poi_search):
    geocoder.failing.add("大熊猫基地")
    poi_search.failing.add("大熊猫基地")

    with pytest.raises(NotFoundInCityError):
        resolver.resolve(CHENGDU, "大熊猫基地")


def test_geocode_error_falls_through_to_search(resolver, geocoder, poi_search):
    geocoder.failing.add("杜甫草堂")
    poi_search.results["杜甫草堂"] = [poi("杜甫草堂", 104.03, 30.66, adcode="510105")]

    place = resolver.resolve(CHENGDU, "杜甫草堂")

    assert place.name == "杜甫草堂"


def test_score_poi_bonuses_add_up():
    exact = poi("春熙路", 104.0, 30.0)
    assert score_poi("春熙路", exact) == 180

    contains = poi("春熙路步行街", 104.0, 30.0, address="春熙路1号", type_tag="购物", phone="028-1")
    assert score_poi("春熙路", contains) == 60 + 15 + 5 + 2


def test_score_poi_popularity_and_rating_are_capped():
    popular = poi("其他", 104.0, 30.0, weight=500.0, rating=4.5)
    assert score_poi("春熙路", popular) == 10 + 4.5
