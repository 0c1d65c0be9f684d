import pytest

from itinerary_router.config import (
    AmapConfig,
    AppConfig,
    PlannerConfig,
    get_config,
    reset_config,
)


@pytest.fixture(autouse=True)
def fresh_config():
    reset_config()
    yield
    reset_config()


def test_defaults(monkeypatch):
    monkeypatch.delenv("ITR_PLANNER_WALKING_SPEED_MPS", raising=False)
    config = PlannerConfig()
    assert config.walking_speed_mps == 1.3
    assert config.request_timeout_seconds == 30.0
    assert AmapConfig().domain == "restapi.amap.com"


def test_env_override(monkeypatch):
    monkeypatch.setenv("ITR_PLANNER_WALKING_SPEED_MPS", "1.1")
    monkeypatch.setenv("ITR_CACHE_CITY_CODE_TTL_SECONDS", "600")

    config = get_config()

    assert config.planner.walking_speed_mps == 1.1
    assert config.cache.city_code_ttl_seconds == 600


@pytest.mark.parametrize("variable", ["ITR_AMAP_API_KEY", "AMAP_WEB_KEY"])
def test_api_key_from_either_variable(monkeypatch, variable):
    monkeypatch.delenv("ITR_AMAP_API_KEY", raising=False)
    monkeypatch.delenv("AMAP_WEB_KEY", raising=False)
    monkeypatch.setenv(variable, "abc123")

    config = AmapConfig()

    assert config.api_key.get_secret_value() == "abc123"
    assert "abc123" not in repr(config)


def test_get_config_is_cached():
    assert get_config() is get_config()
    first = get_config()
    reset_config()
    assert get_config() is not first


def test_explicit_sections():
    config = AppConfig(amap=AmapConfig(api_key="k"), planner=PlannerConfig(max_workers=2))
    assert config.amap.api_key.get_secret_value() == "k"
    assert config.planner.max_workers == 2
