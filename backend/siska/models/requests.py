"""
Request models for the chat endpoint.

The intent arrives already classified by the frontend. It is kept as a plain
string on the wire so that unknown intents reach the dispatcher (and get a
400 with a readable message) instead of failing payload validation.
"""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class Intent(str, Enum):
    """Closed set of intents the dispatcher knows how to serve."""
    PRAYER = "prayer"
    WEATHER = "weather"
    KULINER = "kuliner"
    WISATA = "wisata"
    MASJID = "masjid"
    ONGKIR = "ongkir"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Intent"]:
        """Map a raw intent string to an Intent, or None if unrecognized."""
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def is_place_search(self) -> bool:
        return self in PLACE_INTENTS


PLACE_INTENTS = frozenset({Intent.KULINER, Intent.WISATA, Intent.MASJID})


class Location(BaseModel):
    """Device geolocation sent by the frontend."""
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class ChatRequest(BaseModel):
    """Inbound chat request."""
    intent: Optional[str] = Field(None, description="prayer | weather | kuliner | wisata | masjid | ongkir")
    location: Optional[Location] = None
    message: Optional[str] = ""

    @field_validator("intent", mode="before")
    @classmethod
    def coerce_intent(cls, value: Any) -> Optional[str]:
        # Non-string intents (numbers, lists) are unknown intents, not malformed bodies
        if value is None or isinstance(value, str):
            return value
        return str(value)
