"""
Pydantic models for raw upstream provider payloads.

Only the fields the adapters read are declared; everything is optional or
defaulted where the upstream is known to omit it, and unknown fields are
ignored. Payloads are decoded once at the adapter boundary with the
validate_* helpers below.
"""
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError

M = TypeVar("M", bound=BaseModel)


class SchemaValidationError(Exception):
    """Raised when a provider payload does not match its expected schema."""

    def __init__(self, provider: str, message: str):
        super().__init__(message)
        self.provider = provider


def validate_payload(provider: str, model: Type[M], payload: Dict[str, Any]) -> M:
    """
    Validate a raw provider payload against its schema.

    Raises:
        SchemaValidationError if validation fails.
    """
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise SchemaValidationError(
            provider=provider,
            message=f"Invalid {provider} payload: {exc.error_count()} error(s)",
        ) from exc


# ============================================================================
# Al-Adhan (prayer times)
# ============================================================================

class AladhanTimings(BaseModel):
    Fajr: str
    Dhuhr: str
    Asr: str
    Maghrib: str
    Isha: str


class AladhanMeta(BaseModel):
    timezone: str = ""


class AladhanDate(BaseModel):
    readable: str = ""


class AladhanData(BaseModel):
    timings: AladhanTimings
    meta: AladhanMeta = Field(default_factory=AladhanMeta)
    date: AladhanDate = Field(default_factory=AladhanDate)


class AladhanResponse(BaseModel):
    data: AladhanData


# ============================================================================
# OpenWeather (current weather)
# ============================================================================

class OpenWeatherMain(BaseModel):
    temp: float
    humidity: int = 0


class OpenWeatherWind(BaseModel):
    speed: float = 0.0


class OpenWeatherCondition(BaseModel):
    description: Optional[str] = None


class OpenWeatherResponse(BaseModel):
    name: str = ""
    main: OpenWeatherMain
    wind: OpenWeatherWind = Field(default_factory=OpenWeatherWind)
    weather: List[OpenWeatherCondition] = Field(default_factory=list)


# ============================================================================
# WAQI (air quality)
# ============================================================================

class WaqiData(BaseModel):
    aqi: int
    dominantPollutant: Optional[str] = None
    dominentpol: Optional[str] = None


class WaqiResponse(BaseModel):
    status: str
    # On status "error" WAQI puts a message string here instead of an object.
    data: Any = None


# ============================================================================
# Foursquare (places search)
# ============================================================================

class FoursquareLocation(BaseModel):
    formatted_address: Optional[str] = None


class FoursquareCategory(BaseModel):
    name: Optional[str] = None


class FoursquarePlace(BaseModel):
    name: str
    distance: int = 0
    location: FoursquareLocation = Field(default_factory=FoursquareLocation)
    categories: List[FoursquareCategory] = Field(default_factory=list)


class FoursquareResponse(BaseModel):
    results: List[FoursquarePlace] = Field(default_factory=list)


# ============================================================================
# RajaOngkir (shipping cost)
# ============================================================================

class RajaOngkirStatus(BaseModel):
    code: Optional[int] = None
    description: Optional[str] = None


class RajaOngkirCityDetails(BaseModel):
    city_id: Optional[str] = None
    city_name: Optional[str] = None
    type: Optional[str] = None


class RajaOngkirCostValue(BaseModel):
    value: int
    etd: str = ""
    note: str = ""


class RajaOngkirService(BaseModel):
    service: str
    description: str = ""
    cost: List[RajaOngkirCostValue] = Field(default_factory=list)


class RajaOngkirCourier(BaseModel):
    code: str
    name: str = ""
    costs: List[RajaOngkirService] = Field(default_factory=list)


class RajaOngkirBody(BaseModel):
    status: RajaOngkirStatus = Field(default_factory=RajaOngkirStatus)
    origin_details: Optional[RajaOngkirCityDetails] = None
    destination_details: Optional[RajaOngkirCityDetails] = None
    results: List[RajaOngkirCourier] = Field(default_factory=list)


class RajaOngkirResponse(BaseModel):
    rajaongkir: RajaOngkirBody
