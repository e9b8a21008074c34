"""
Normalized data produced by the provider adapters.

These are the only shapes that aggregators and renderers see; raw provider
payloads never leave the adapter that decoded them.
"""
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field

# Scan order matters: the prayer renderer picks the first name found in the message.
PRAYER_NAMES = ("subuh", "dzuhur", "ashar", "maghrib", "isya")


class PrayerSchedule(BaseModel):
    """Today's five prayer times for the user's location."""
    city_label: str
    date_label: str
    times: Dict[str, str] = Field(..., description="prayer name -> HH:MM")


class WeatherSnapshot(BaseModel):
    """Current weather at the user's location."""
    city_label: str
    temp_celsius: int
    condition: str
    humidity_pct: int
    wind_speed: float


class AirQualityLevel(str, Enum):
    BAIK = "Baik"
    SEDANG = "Sedang"
    TIDAK_SEHAT_SENSITIF = "Tidak Sehat bagi Kelompok Sensitif"
    TIDAK_SEHAT = "Tidak Sehat"


class AirQuality(BaseModel):
    """Air quality index at the user's location."""
    index: int
    level: AirQualityLevel
    dominant_pollutant: str = "PM2.5"


class PlaceEntry(BaseModel):
    """One nearby place returned by the places provider."""
    name: str
    distance_meters: int
    address: str = "Alamat tidak tersedia"
    category: str = "Tempat"


class ShippingQuery(BaseModel):
    """Shipping parameters extracted from free text."""
    origin: str = "jakarta"
    destination: str = "surabaya"
    weight_grams: int = Field(1000, ge=1)


class ShippingOffer(BaseModel):
    """One priced service of one courier."""
    courier_code: str
    service_name: str
    description: str = ""
    cost_value: int
    etd_label: str = ""


class CourierQuote(BaseModel):
    """All services one courier offered for a route."""
    code: str
    name: str = ""
    offers: List[ShippingOffer] = Field(default_factory=list)


class ShippingQuote(BaseModel):
    """Combined multi-courier answer of the shipping-cost provider."""
    origin_label: str
    destination_label: str
    weight_grams: int
    couriers: List[CourierQuote] = Field(default_factory=list)
