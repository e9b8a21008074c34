"""
Shipping parameter extraction (rule-based).

Turns messages like "ongkir dari jkt ke sby 2kg" into a ShippingQuery.
Extraction never fails: anything that cannot be read keeps its default
(origin "jakarta", destination "surabaya", 1000 grams).

Tie-break: when a pattern matches more than once, the first (leftmost)
match wins. This applies to the weight and to the route.
"""
import re
from typing import Tuple

from siska.core.logging import get_logger
from siska.models.domain import ShippingQuery

logger = get_logger(__name__)

DEFAULT_ORIGIN = "jakarta"
DEFAULT_DESTINATION = "surabaya"
DEFAULT_WEIGHT_GRAMS = 1000

# "2kg", "2 kg", "500gram", "500 g"; alternation order keeps "kg" ahead of "g"
WEIGHT_PATTERN = re.compile(r"(\d+)\s*(kg|gram|g)")

# "[dari ]jkt ke sby", "jkt - sby", "jkt-sby"
ROUTE_PATTERN = re.compile(r"(?:dari\s+)?([a-z]+)(?:\s+ke\s+|\s*-\s*)([a-z]+)")

# "ongkir jkt sby"
SIMPLE_ROUTE_PATTERN = re.compile(r"ongkir\s+([a-z]+)\s+([a-z]+)")


def extract_weight_grams(text: str) -> int:
    """
    Extract the parcel weight in grams from lower-cased text.

    Returns DEFAULT_WEIGHT_GRAMS when no weight is mentioned or the first
    mentioned weight is zero.
    """
    match = WEIGHT_PATTERN.search(text)
    if not match:
        return DEFAULT_WEIGHT_GRAMS

    amount = int(match.group(1))
    grams = amount * 1000 if match.group(2) == "kg" else amount
    return grams if grams >= 1 else DEFAULT_WEIGHT_GRAMS


def extract_route(text: str) -> Tuple[str, str]:
    """Extract (origin, destination) from lower-cased text, or the defaults."""
    match = ROUTE_PATTERN.search(text) or SIMPLE_ROUTE_PATTERN.search(text)
    if not match:
        return DEFAULT_ORIGIN, DEFAULT_DESTINATION
    return match.group(1), match.group(2)


def parse_shipping_query(message: str) -> ShippingQuery:
    """
    Extract origin, destination and weight from a free-text shipping question.

    Args:
        message: Raw user message (any case)

    Returns:
        ShippingQuery with defaults for anything not found
    """
    lower = (message or "").lower()
    origin, destination = extract_route(lower)
    query = ShippingQuery(
        origin=origin,
        destination=destination,
        weight_grams=extract_weight_grams(lower),
    )
    logger.debug(
        "shipping_query_extracted",
        origin=query.origin,
        destination=query.destination,
        weight_grams=query.weight_grams,
    )
    return query
