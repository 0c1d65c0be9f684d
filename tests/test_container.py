import pytest

from itinerary_router.adapters.amap import AmapGeocoderAdapter, AmapTransitAdapter
from itinerary_router.adapters.cache import InMemoryCache
from itinerary_router.config import AmapConfig, AppConfig, CacheConfig
from itinerary_router.container import Container
from itinerary_router.domain.errors import ConfigurationError
from itinerary_router.ports import CachePort, GeocoderPort, PoiSearchPort, TransitRouterPort
from itinerary_router.services import ItineraryPlanner


def test_register_and_resolve_singleton():
    container = Container(config=AppConfig())
    container.register(GeocoderPort, lambda: object())

    assert container.is_registered(GeocoderPort)
    assert container.resolve(GeocoderPort) is container.resolve(GeocoderPort)


def test_register_transient():
    container = Container(config=AppConfig())
    container.register(GeocoderPort, lambda: object(), singleton=False)
    assert container.resolve(GeocoderPort) is not container.resolve(GeocoderPort)


def test_unregistered_type_raises():
    with pytest.raises(KeyError):
        Container(config=AppConfig()).resolve(GeocoderPort)


def test_default_wiring_shares_one_client():
    config = AppConfig(
        amap=AmapConfig(api_key="k"),
        cache=CacheConfig(city_code_ttl_seconds=60, max_size=8),
    )
    container = Container.create_default(config)

    planner = container.resolve(ItineraryPlanner)

    geocoder = container.resolve(GeocoderPort)
    assert isinstance(geocoder, AmapGeocoderAdapter)
    assert container.resolve(PoiSearchPort) is geocoder
    transit = container.resolve(TransitRouterPort)
    assert isinstance(transit, AmapTransitAdapter)
    assert transit.client is geocoder.client
    assert planner.geocoder is geocoder

    cache = container.resolve(CachePort)
    assert isinstance(cache, InMemoryCache)
    assert cache.default_ttl_seconds == 60
    assert planner.city_code_cache is cache


def test_missing_api_key_fails_on_resolve(monkeypatch):
    monkeypatch.delenv("AMAP_WEB_KEY", raising=False)
    monkeypatch.delenv("ITR_AMAP_API_KEY", raising=False)
    container = Container.create_default(AppConfig(amap=AmapConfig()))

    with pytest.raises(ConfigurationError):
        container.resolve(ItineraryPlanner)
