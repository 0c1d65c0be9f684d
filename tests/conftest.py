"""Shared fixtures wiring the in-memory fakes."""

import pytest

from fakes import FakeGeocoder, FakePoiSearch, FakeTransitRouter
from itinerary_router.config import PlannerConfig
from itinerary_router.domain.models import CityInfo


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def poi_search():
    return FakePoiSearch()


@pytest.fixture
def transit():
    return FakeTransitRouter()


@pytest.fixture
def planner_config():
    return PlannerConfig()


@pytest.fixture
def chengdu_info():
    return CityInfo(city_name="成都市", city_code="028", district_code="510104")
