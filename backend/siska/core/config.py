"""
Process-wide configuration for the proxy.

Settings are read once from the environment (optionally seeded from a
.env file at the repository root) and frozen afterwards. Provider adapters
receive the Settings instance explicitly; nothing mutates it at runtime.

Environment configuration:
- FOURSQUARE_KEY: Foursquare Places API key
- OPENWEATHER_KEY: OpenWeather API key
- AQI_TOKEN: WAQI (aqicn.org) token
- RAJAONGKIR_SHIPPING_KEY: RajaOngkir starter API key
- FRONTEND_URL: Allowed CORS origin (default: *)
- PROVIDER_TIMEOUT_SECONDS: Timeout for each outbound provider call (default: 8.0)
- LOG_LEVEL / LOG_JSON: Logging configuration
- PORT: Listening port when started with `python -m siska` (default: 8000)
"""
import os
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from siska.core.logging import get_logger

logger = get_logger(__name__)

# .env in the repository root (backend/siska/core -> repo root)
ENV_PATH = Path(__file__).parent.parent.parent.parent / ".env"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings(BaseModel):
    """Immutable provider credentials and runtime knobs."""

    model_config = ConfigDict(frozen=True)

    foursquare_key: str = ""
    openweather_key: str = ""
    aqi_token: str = ""
    rajaongkir_key: str = ""
    frontend_url: str = "*"
    provider_timeout_seconds: float = Field(8.0, gt=0)
    log_level: str = "INFO"
    log_json: bool = True
    port: int = 8000

    @classmethod
    def from_env(cls, env_path: Optional[Path] = None) -> "Settings":
        """
        Build settings from environment variables.

        A .env file is loaded first when present; variables already set in the
        process environment take precedence over the file.
        """
        path = env_path or ENV_PATH
        if path.exists():
            load_dotenv(path)
            logger.info("env_loaded", env_path=str(path))

        return cls(
            foursquare_key=os.getenv("FOURSQUARE_KEY", ""),
            openweather_key=os.getenv("OPENWEATHER_KEY", ""),
            aqi_token=os.getenv("AQI_TOKEN", ""),
            rajaongkir_key=os.getenv("RAJAONGKIR_SHIPPING_KEY", ""),
            frontend_url=os.getenv("FRONTEND_URL", "") or "*",
            provider_timeout_seconds=float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "8.0") or "8.0"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=_env_bool("LOG_JSON", "true"),
            port=int(os.getenv("PORT", "8000") or "8000"),
        )

    def credential_status(self) -> Dict[str, bool]:
        """
        Report which credentials are configured.

        Only presence is reported, never the secret values.
        """
        return {
            "foursquare": bool(self.foursquare_key),
            "openweather": bool(self.openweather_key),
            "aqi": bool(self.aqi_token),
            "rajaongkir": bool(self.rajaongkir_key),
            "frontend_url": self.frontend_url != "*",
        }


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Global singleton accessor for settings."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
