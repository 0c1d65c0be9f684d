"""AMap adapters - Implementations of the upstream service ports.

Available implementations:
- AmapGeocoderAdapter: GeocoderPort and PoiSearchPort
- AmapTransitAdapter: TransitRouterPort
"""

from .client import AMap, create_client
from .geocoder_adapter import AmapGeocoderAdapter
from .transit_adapter import AmapTransitAdapter

__all__ = ["AMap", "create_client", "AmapGeocoderAdapter", "AmapTransitAdapter"]
