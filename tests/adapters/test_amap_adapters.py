"""Tests for the AMap port adapters with a mocked client."""

from unittest.mock import MagicMock

import pytest
from geopy.exc import GeocoderServiceError
from geopy.location import Location

from fakes import make_place
from itinerary_router.adapters.amap import AmapGeocoderAdapter, AmapTransitAdapter
from itinerary_router.adapters.amap.transit_adapter import parse_transit
from itinerary_router.config import AmapConfig
from itinerary_router.domain.errors import UpstreamError


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def geocoder(client):
    return AmapGeocoderAdapter(AmapConfig(api_key="k", poi_page_size=7), client)


@pytest.fixture
def transit(client):
    return AmapTransitAdapter(AmapConfig(api_key="k"), client)


def test_geocode_maps_candidates(geocoder, client):
    client.geocode.return_value = [
        Location(
            "北京市东城区",
            (39.90, 116.40),
            {"formatted_address": "北京市东城区", "adcode": "110101", "city": [], "province": "北京市", "citycode": "010"},
        ),
        Location(
            "四川省成都市",
            (30.66, 104.07),
            {"formatted_address": "四川省成都市", "adcode": "510104", "city": "成都市", "citycode": "028"},
        ),
    ]

    places = geocoder.geocode("天安门", city="北京")

    client.geocode.assert_called_once_with("天安门", city="北京", exactly_one=False)
    assert [p.name for p in places] == ["天安门", "天安门"]
    # Municipalities report an empty city; the province names it.
    assert places[0].city_name == "北京市"
    assert places[1].district_code == "510104"
    assert (places[1].lng, places[1].lat) == (104.07, 30.66)


def test_geocode_blank_query_skips_upstream(geocoder, client):
    assert geocoder.geocode("  ") == []
    client.geocode.assert_not_called()


def test_geopy_errors_become_upstream_errors(geocoder, transit, client):
    client.geocode.side_effect = GeocoderServiceError("down")
    client.transit.side_effect = GeocoderServiceError("down")
    a = make_place("A", 104.06, 30.67)
    b = make_place("B", 104.07, 30.66)

    with pytest.raises(UpstreamError) as exc_info:
        geocoder.geocode("武侯祠")
    assert exc_info.value.service == "geocode"
    assert isinstance(exc_info.value.cause, GeocoderServiceError)

    with pytest.raises(UpstreamError):
        transit.plan(a, b)


def test_reverse_geocode_reads_address_component(geocoder, client):
    client.reverse.return_value = Location(
        "四川省成都市青羊区",
        (30.67, 104.06),
        {"addressComponent": {"city": "成都市", "citycode": "028", "adcode": "510105"}},
    )

    info = geocoder.reverse_geocode(make_place("A", 104.06, 30.67))

    client.reverse.assert_called_once_with((30.67, 104.06))
    assert (info.city_name, info.city_code, info.district_code) == ("成都市", "028", "510105")


def test_reverse_geocode_without_result(geocoder, client):
    client.reverse.return_value = None
    assert geocoder.reverse_geocode(make_place("A", 104.06, 30.67)) is None


def test_search_maps_scoring_fields(geocoder, client):
    client.search_text.return_value = [
        Location(
            "春熙路",
            (30.655, 104.08),
            {
                "name": "春熙路",
                "address": "锦江区春熙路",
                "type": "购物服务;商业街",
                "tel": [],
                "adcode": "510104",
                "cityname": "成都市",
                "biz_ext": {"rating": "4.6"},
                "weight": "90",
            },
        )
    ]

    (candidate,) = geocoder.search("春熙路", city="510100")

    client.search_text.assert_called_once_with(
        "春熙路", city="510100", city_limit=True, page_size=7
    )
    assert candidate.name == "春熙路"
    assert candidate.rating == 4.6
    assert candidate.weight == 90.0
    assert candidate.phone == ""
    assert candidate.place.city_name == "成都市"
    assert candidate.place.district_code == "510104"


def test_transit_plan_passes_endpoint_codes(transit, client):
    client.transit.return_value = [{"distance": "5200", "cost": {"duration": "1800", "transit_fee": "2.0"}}]
    a = make_place("A", 104.06, 30.67)
    b = make_place("B", 104.07, 30.66)

    (plan,) = transit.plan(a, b, "028", "028", "510104", None)

    client.transit.assert_called_once_with(
        "104.06,30.67", "104.07,30.66", city1="028", city2="028", ad1="510104", ad2=None
    )
    assert (plan.distance_m, plan.duration_s, plan.cost) == (5200.0, 1800.0, 2.0)


def test_estimate_duration_uses_first_itinerary(transit, client):
    client.transit_v3.return_value = [{"duration": "1500"}, {"duration": "900"}]
    a = make_place("A", 104.06, 30.67)
    b = make_place("B", 104.07, 30.66)

    assert transit.estimate_duration(a, b, city="028") == 1500.0
    client.transit_v3.assert_called_once_with("104.06,30.67", "104.07,30.66", city="028")


def test_parse_transit_segments():
    plan = parse_transit(
        {
            "distance": [],
            "segments": [
                {
                    "walking": {"distance": "300", "cost": {"duration": "240"}},
                    "bus": {"buslines": [{"name": "地铁1号线", "distance": "4000", "cost": {"duration": "900"}}]},
                },
                {"railway": {"name": "G8", "distance": "9000", "time": "1200"}, "walking": []},
                {"taxi": {"distance": "1500", "drivetime": "300"}},
            ],
        }
    )

    assert plan.distance_m is None
    assert plan.duration_s is None
    assert [s.kind for s in plan.segments] == ["walking", "bus", "railway", "taxi"]
    assert plan.segments[1].name == "地铁1号线"
    assert plan.summed("distance_m") == 14800.0
    assert plan.summed("duration_s") == 2640.0


def test_parse_transit_flat_cost():
    plan = parse_transit({"distance": "100", "duration": "60", "cost": "3"})
    assert (plan.distance_m, plan.duration_s, plan.cost) == (100.0, 60.0, 3.0)
