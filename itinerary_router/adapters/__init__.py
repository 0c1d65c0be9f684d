"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the planner to external systems:
- AMap web services (geocoding, POI search, transit routing)
- Caching systems (in-memory, null)
"""
