"""Shipping-cost helpers: free-text parameter extraction and city resolution."""

from .cities import ResolvedCity, resolve_city
from .extractor import parse_shipping_query

__all__ = ["ResolvedCity", "resolve_city", "parse_shipping_query"]
