"""Dependency injection container.

This module provides a simple DI container without external frameworks.
It allows registering and resolving dependencies for the application.

Design principles:
1. No magic - explicit registration and resolution
2. Testable - easy to swap implementations
3. Lazy loading - adapters instantiated on first use
4. Thread-safe - the planner fans out across worker threads
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .config import AppConfig, get_config


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        planner = container.resolve(ItineraryPlanner)

        # Testing
        container = Container()
        container.register(GeocoderPort, lambda: FakeGeocoder())
        geocoder = container.resolve(GeocoderPort)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a port type.

        Args:
            port_type: The type (usually a Protocol) to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        with self._lock:
            self._factories[port_type] = factory
            if singleton:
                self._singleton_types.add(port_type)
            else:
                self._singleton_types.discard(port_type)
            self._singletons.pop(port_type, None)

    def resolve(self, port_type: type[Any]) -> Any:
        """Resolve an instance of a port type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def is_registered(self, port_type: type[Any]) -> bool:
        return port_type in self._factories

    def clear_singletons(self) -> None:
        """Clear all cached singletons."""
        with self._lock:
            self._singletons.clear()

    def clear_all(self) -> None:
        """Clear all registrations and singletons."""
        with self._lock:
            self._factories.clear()
            self._singletons.clear()
            self._singleton_types.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with the AMap-backed production bindings.

        Adapters are built on first resolve; a missing API key raises
        ConfigurationError at that point rather than mid-request.

        Args:
            config: Optional configuration override.

        Returns:
            A configured Container instance.
        """
        from .adapters.amap import AmapGeocoderAdapter, AmapTransitAdapter, create_client
        from .adapters.cache import InMemoryCache
        from .ports.cache import CachePort
        from .ports.geocoding import GeocoderPort
        from .ports.poi import PoiSearchPort
        from .ports.sequencing import RouteSequencerPort
        from .ports.transit import TransitRouterPort
        from .routing import ClusteredRouteSequencer
        from .services import ItineraryPlanner, LegResolver, PlaceResolver

        config = config or get_config()
        container = cls(config=config)

        # City name -> adcode lookups
        city_codes: InMemoryCache[str] = InMemoryCache(
            default_ttl_seconds=config.cache.city_code_ttl_seconds,
            max_size=config.cache.max_size,
            name="city-code",
        )
        container.register(CachePort, lambda: city_codes)

        # Upstream services share one HTTP client
        container.register(
            AmapGeocoderAdapter,
            lambda: AmapGeocoderAdapter(config.amap, create_client(config.amap)),
        )
        container.register(GeocoderPort, lambda: container.resolve(AmapGeocoderAdapter))
        container.register(PoiSearchPort, lambda: container.resolve(AmapGeocoderAdapter))
        container.register(
            TransitRouterPort,
            lambda: AmapTransitAdapter(
                config.amap, container.resolve(AmapGeocoderAdapter).client
            ),
        )

        container.register(
            RouteSequencerPort,
            lambda: ClusteredRouteSequencer(config.planner),
        )

        container.register(
            PlaceResolver,
            lambda: PlaceResolver(
                geocoder=container.resolve(GeocoderPort),
                poi_search=container.resolve(PoiSearchPort),
            ),
        )
        container.register(
            LegResolver,
            lambda: LegResolver(
                geocoder=container.resolve(GeocoderPort),
                transit_router=container.resolve(TransitRouterPort),
                config=config.planner,
            ),
        )

        # Main service
        def create_planner() -> ItineraryPlanner:
            return ItineraryPlanner(
                place_resolver=container.resolve(PlaceResolver),
                leg_resolver=container.resolve(LegResolver),
                sequencer=container.resolve(RouteSequencerPort),
                geocoder=container.resolve(GeocoderPort),
                city_code_cache=container.resolve(CachePort),
                config=config.planner,
            )

        container.register(ItineraryPlanner, create_planner)

        return container


# Global default container (lazy initialized)
_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get the default application container, creating it if needed."""
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container.create_default()
    return _default_container


def reset_container() -> None:
    """Reset the default container.

    Call this in tests to ensure a fresh container.
    """
    global _default_container
    with _container_lock:
        if _default_container is not None:
            _default_container.clear_all()
        _default_container = None
