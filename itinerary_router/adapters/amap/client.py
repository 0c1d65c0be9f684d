"""AMap (Gaode) web service client.

Written as a geopy geocoder so it shares geopy's HTTP adapters, timeout
handling and exception hierarchy. Besides the usual ``geocode`` and
``reverse`` it exposes the keyword search and transit endpoints the
itinerary planner needs; those return the raw JSON payloads.

Coordinates travel as ``"lng,lat"`` strings in GCJ-02.
"""

from __future__ import annotations

import logging
import math
from functools import partial
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

from geopy.exc import (
    GeocoderAuthenticationFailure,
    GeocoderInsufficientPrivileges,
    GeocoderParseError,
    GeocoderQueryError,
    GeocoderQuotaExceeded,
    GeocoderRateLimited,
    GeocoderServiceError,
    GeocoderUnavailable,
)
from geopy.geocoders.base import DEFAULT_SENTINEL, Geocoder
from geopy.location import Location

if TYPE_CHECKING:
    from ...config import AmapConfig

logger = logging.getLogger(__name__)

_AUTH_CODES = {"10001", "10005", "10006", "10007", "10008", "10009", "10013"}
_QUOTA_CODES = {"10003", "10010", "10029"}
_RATE_CODES = {"10004", "10014", "10019", "10020", "10021"}
_UNAVAILABLE_CODES = {"10002", "10015", "10016", "10017"}
_QUERY_CODES = {"10026", "20000", "20001", "20002", "20003"}


def text_field(value: Any) -> Optional[str]:
    """Normalize an AMap string field.

    AMap serializes missing strings as ``[]``; those and blanks become None.
    """
    if value is None or isinstance(value, (list, dict)):
        return None
    text = str(value).strip()
    return text or None


def number_field(value: Any) -> Optional[float]:
    """Parse a numeric AMap field (usually sent as a string)."""
    text = text_field(value)
    if text is None:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_lnglat(value: Any) -> Optional[Tuple[float, float]]:
    """Parse ``"lng,lat"``; returns None when malformed."""
    text = text_field(value)
    if not text:
        return None
    parts = text.split(",")
    if len(parts) != 2:
        return None
    try:
        lng, lat = float(parts[0]), float(parts[1])
    except ValueError:
        return None
    if not (-180 <= lng <= 180 and -90 <= lat <= 90):
        return None
    return lng, lat


class AMap(Geocoder):
    """Geocoder for the AMap web service API (v3/v5).

    Documentation at:
        https://lbs.amap.com/api/webservice/summary
    """

    geocode_path = "/v3/geocode/geo"
    reverse_path = "/v3/geocode/regeo"
    place_text_path = "/v3/place/text"
    transit_path = "/v5/direction/transit/integrated"
    transit_v3_path = "/v3/direction/transit/integrated"

    def __init__(
        self,
        api_key: str,
        *,
        domain: str = "restapi.amap.com",
        scheme: Optional[str] = None,
        timeout: Any = DEFAULT_SENTINEL,
        proxies: Any = DEFAULT_SENTINEL,
        user_agent: Optional[str] = None,
        ssl_context: Any = DEFAULT_SENTINEL,
        adapter_factory: Any = None,
    ) -> None:
        super().__init__(
            scheme=scheme,
            timeout=timeout,
            proxies=proxies,
            user_agent=user_agent,
            ssl_context=ssl_context,
            adapter_factory=adapter_factory,
        )
        self.api_key = api_key
        self.domain = domain.strip("/")

    def _url(self, path: str, params: Dict[str, Any]) -> str:
        query = {"key": self.api_key, "output": "JSON"}
        query.update({k: v for k, v in params.items() if v is not None})
        return "%s://%s%s?%s" % (self.scheme, self.domain, path, urlencode(query))

    def _request(
        self,
        name: str,
        path: str,
        params: Dict[str, Any],
        callback: Any,
        timeout: Any,
    ) -> Any:
        url = self._url(path, params)
        logger.debug(
            "%s.%s: %s", type(self).__name__, name, url.replace(self.api_key, "***")
        )
        return self._call_geocoder(url, callback, timeout=timeout)

    def geocode(
        self,
        query: str,
        *,
        city: Optional[str] = None,
        exactly_one: bool = True,
        timeout: Any = DEFAULT_SENTINEL,
    ) -> Any:
        """Return a location point by address.

        :param query: The address or place name to geocode.
        :param city: City name, citycode or adcode scoping the lookup.
        :param exactly_one: Return one result or a list of results.
        :rtype: ``None``, :class:`geopy.location.Location` or a list of them.
        """
        params = {"address": query, "city": city}
        callback = partial(self._parse_geocode, exactly_one=exactly_one)
        return self._request("geocode", self.geocode_path, params, callback, timeout)

    def reverse(
        self,
        query: Tuple[float, float],
        *,
        timeout: Any = DEFAULT_SENTINEL,
    ) -> Optional[Location]:
        """Return the administrative context of a ``(lat, lng)`` point.

        The raw payload is the ``regeocode`` object; its
        ``addressComponent`` carries city, citycode and adcode.
        """
        lat, lng = query
        params = {"location": f"{lng},{lat}", "extensions": "base"}
        callback = partial(self._parse_reverse, point=(lat, lng))
        return self._request("reverse", self.reverse_path, params, callback, timeout)

    def search_text(
        self,
        keywords: str,
        *,
        city: Optional[str] = None,
        city_limit: bool = False,
        page_size: int = 10,
        timeout: Any = DEFAULT_SENTINEL,
    ) -> List[Location]:
        """Keyword POI search. Raw payloads are the POI objects."""
        params: Dict[str, Any] = {
            "keywords": keywords,
            "offset": page_size,
            "page": 1,
            "extensions": "all",
        }
        if city:
            params["city"] = city
            if city_limit:
                params["citylimit"] = "true"
        return self._request(
            "search_text", self.place_text_path, params, self._parse_pois, timeout
        )

    def transit(
        self,
        origin: str,
        destination: str,
        *,
        city1: Optional[str] = None,
        city2: Optional[str] = None,
        ad1: Optional[str] = None,
        ad2: Optional[str] = None,
        strategy: int = 0,
        timeout: Any = DEFAULT_SENTINEL,
    ) -> List[Dict[str, Any]]:
        """Integrated transit itineraries (v5), best first."""
        params = {
            "origin": origin,
            "destination": destination,
            "city1": city1,
            "city2": city2,
            "ad1": ad1,
            "ad2": ad2,
            "strategy": strategy,
            "show_fields": "cost",
        }
        return self._request(
            "transit", self.transit_path, params, self._parse_transits, timeout
        )

    def transit_v3(
        self,
        origin: str,
        destination: str,
        *,
        city: Optional[str] = None,
        strategy: int = 0,
        timeout: Any = DEFAULT_SENTINEL,
    ) -> List[Dict[str, Any]]:
        """Integrated transit itineraries from the older v3 endpoint."""
        params = {
            "origin": origin,
            "destination": destination,
            "city": city,
            "strategy": strategy,
        }
        return self._request(
            "transit_v3", self.transit_v3_path, params, self._parse_transits, timeout
        )

    def _check_status(self, page: Any) -> None:
        if not isinstance(page, dict):
            raise GeocoderParseError("Unexpected AMap response: %r" % (page,))
        if str(page.get("status")) == "1":
            return
        code = str(page.get("infocode", ""))
        info = page.get("info", "unknown error")
        message = "AMap error %s: %s" % (code, info)
        if code in _AUTH_CODES:
            raise GeocoderAuthenticationFailure(message)
        if code == "10012":
            raise GeocoderInsufficientPrivileges(message)
        if code in _QUOTA_CODES:
            raise GeocoderQuotaExceeded(message)
        if code in _RATE_CODES:
            raise GeocoderRateLimited(message)
        if code in _UNAVAILABLE_CODES:
            raise GeocoderUnavailable(message)
        if code in _QUERY_CODES:
            raise GeocoderQueryError(message)
        raise GeocoderServiceError(message)

    def _parse_geocode(self, page: Any, exactly_one: bool = True) -> Any:
        self._check_status(page)
        geocodes = page.get("geocodes") or []
        locations = [
            loc
            for loc in (self._location(g, "formatted_address") for g in geocodes)
            if loc is not None
        ]
        if not locations:
            return None if exactly_one else []
        return locations[0] if exactly_one else locations

    def _parse_pois(self, page: Any) -> List[Location]:
        self._check_status(page)
        pois = page.get("pois") or []
        return [loc for loc in (self._location(p, "name") for p in pois) if loc is not None]

    def _parse_reverse(self, page: Any, point: Tuple[float, float]) -> Optional[Location]:
        self._check_status(page)
        regeocode = page.get("regeocode")
        if not isinstance(regeocode, dict):
            return None
        address = text_field(regeocode.get("formatted_address")) or ""
        return Location(address, point, regeocode)

    def _parse_transits(self, page: Any) -> List[Dict[str, Any]]:
        self._check_status(page)
        route = page.get("route")
        if not isinstance(route, dict):
            return []
        transits = route.get("transits")
        return [t for t in transits if isinstance(t, dict)] if isinstance(transits, list) else []

    @staticmethod
    def _location(raw: Any, address_key: str) -> Optional[Location]:
        if not isinstance(raw, dict):
            return None
        lnglat = parse_lnglat(raw.get("location"))
        if lnglat is None:
            return None
        lng, lat = lnglat
        address = text_field(raw.get(address_key)) or ""
        return Location(address, (lat, lng), raw)


def create_client(config: AmapConfig) -> AMap:
    """Build an AMap client from configuration.

    Raises:
        ConfigurationError: If no API key is configured.
    """
    from ...domain.errors import ConfigurationError

    if config.api_key is None or not config.api_key.get_secret_value():
        raise ConfigurationError(
            "AMap API key is missing; set ITR_AMAP_API_KEY or AMAP_WEB_KEY",
            setting_name="amap.api_key",
        )
    return AMap(
        config.api_key.get_secret_value(),
        domain=config.domain,
        scheme=config.scheme,
        timeout=config.timeout_seconds,
        user_agent=config.user_agent,
    )
