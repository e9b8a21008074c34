"""
City resolution for the shipping-cost provider.

RajaOngkir identifies cities by numeric ids. The proxy only knows a fixed
set of major cities and their common abbreviations; lookup is exact and
case-insensitive, with no fuzzy matching.
"""
from dataclasses import dataclass
from typing import Dict, Optional

# alias -> RajaOngkir city id
CITY_IDS: Dict[str, str] = {
    "jakarta": "152", "jkt": "152",
    "bandung": "23", "bdg": "23",
    "surabaya": "444", "sby": "444",
    "semarang": "399", "smg": "399",
    "yogyakarta": "573", "jogja": "573",
    "medan": "222",
    "makassar": "196",
    "palembang": "320",
    "denpasar": "114", "bali": "114",
}

# city id -> display label, used when the provider omits city names
CITY_LABELS: Dict[str, str] = {
    "152": "Jakarta",
    "23": "Bandung",
    "444": "Surabaya",
    "399": "Semarang",
    "573": "Yogyakarta",
    "222": "Medan",
    "196": "Makassar",
    "320": "Palembang",
    "114": "Denpasar",
}


@dataclass(frozen=True)
class ResolvedCity:
    city_id: str
    label: str


def resolve_city(name: str) -> Optional[ResolvedCity]:
    """
    Resolve a city name or abbreviation to its provider id.

    Returns:
        ResolvedCity, or None if the name is not in the table
    """
    city_id = CITY_IDS.get((name or "").strip().lower())
    if city_id is None:
        return None
    return ResolvedCity(city_id=city_id, label=CITY_LABELS[city_id])


def unresolved_city_message(name: str) -> str:
    return f'Maaf, saya belum mengenali kota "{name}". Database kota saya masih terbatas.'
