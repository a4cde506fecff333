"""
Nextrip data sources.
"""

from nextrip.datasource.base import BaseDataSource, build_url
from nextrip.datasource.metro_transit import NextripSource, Route

__all__ = ["BaseDataSource", "build_url", "NextripSource", "Route"]
