"""
Response renderers.

Pure functions from aggregated data to the Indonesian markdown text the
frontend displays. No I/O, no logging.
"""
import re
from typing import List, Optional

from siska.models.domain import PRAYER_NAMES, AirQuality, PlaceEntry, PrayerSchedule
from siska.models.requests import Intent
from siska.services.chat.aggregation import ShippingReport, WeatherReport
from siska.services.providers.base import FailureKind, ProviderError, ProviderResult

GREETING = "Tentu"

PRAYER_FAILURE_TEXT = (
    "Maaf, saya gagal mengambil jadwal sholat untuk lokasi Anda. Pastikan GPS aktif dan coba lagi."
)
WEATHER_FAILURE_TEXT = (
    "Maaf, saya gagal mengambil data cuaca untuk lokasi Anda. Pastikan GPS aktif dan coba lagi."
)
AQI_UNAVAILABLE_TEXT = "Data kualitas udara (AQI) tidak tersedia untuk lokasi ini."
SHIPPING_FAILURE_TEXT = "Maaf, saya gagal mengambil data ongkos kirim saat ini. Silakan coba lagi nanti."
UNKNOWN_INTENT_TEXT = "Niat (intent) tidak dikenali oleh server proxy."
INTERNAL_ERROR_TEXT = "Maaf, terjadi kesalahan internal pada server."
INVALID_REQUEST_TEXT = "Maaf, format permintaan tidak valid."

LOCATION_REQUIRED_TEXT = (
    "Saya membutuhkan lokasi Anda untuk menjawab {topic}. "
    "Izinkan akses lokasi (GPS) di perangkat Anda lalu coba lagi."
)

PLACE_NOUNS = {
    Intent.KULINER: "tempat kuliner",
    Intent.WISATA: "tempat wisata",
    Intent.MASJID: "masjid",
}

_ETD_UNIT = re.compile(r"\s*hari\s*$", re.IGNORECASE)


def location_required_text(topic: str) -> str:
    return LOCATION_REQUIRED_TEXT.format(topic=topic)


def _input_missing(error: Optional[ProviderError]) -> bool:
    return error is not None and error.kind == FailureKind.INPUT_MISSING


def format_rupiah(value: int) -> str:
    """Format an amount with Indonesian digit grouping: 1250000 -> "Rp 1.250.000"."""
    return "Rp " + f"{value:,}".replace(",", ".")


def format_weight_kg(weight_grams: int) -> str:
    """2000 -> "2", 500 -> "0.5", 1250 -> "1.25"."""
    return f"{weight_grams / 1000:f}".rstrip("0").rstrip(".")


def strip_etd_unit(etd: str) -> str:
    """Drop the day unit from the courier's estimate: "2-3 HARI" -> "2-3"."""
    return _ETD_UNIT.sub("", etd or "").strip()


# ============================================================================
# Prayer
# ============================================================================

def render_prayer(result: ProviderResult[PrayerSchedule], message: str) -> str:
    """
    Render prayer times.

    If the message names one of the five prayers, only that time is given
    (scan order subuh, dzuhur, ashar, maghrib, isya; first hit wins).
    Otherwise the full schedule is listed.
    """
    if _input_missing(result.error):
        return location_required_text("jadwal sholat")
    if not result.ok:
        return PRAYER_FAILURE_TEXT

    schedule = result.data
    lower = (message or "").lower()
    for name in PRAYER_NAMES:
        if name in lower:
            return (
                f"{GREETING}, waktu **{name}** untuk **{schedule.city_label}** hari ini "
                f"adalah pukul **{schedule.times[name]}**. (Data Live)"
            )

    lines = [
        f"{GREETING}! Berikut jadwal sholat untuk **{schedule.city_label}** hari ini "
        f"({schedule.date_label}) dari API Al-Adhan (Live):",
        "",
    ]
    lines.extend(f"• {name.capitalize()}: **{schedule.times[name]}**" for name in PRAYER_NAMES)
    return "\n".join(lines) + "\n"


# ============================================================================
# Weather
# ============================================================================

def render_aqi_clause(aqi: Optional[AirQuality]) -> str:
    if aqi is None:
        return AQI_UNAVAILABLE_TEXT
    if aqi.index > 100:
        return (
            f"Kualitas udara ({aqi.index}) **{aqi.level.value}** "
            f"(polutan dominan: {aqi.dominant_pollutant}). "
            "Sebaiknya kurangi aktivitas di luar ruangan atau gunakan masker."
        )
    return f"Kualitas udara ({aqi.index}) **Baik**. Aman untuk beraktivitas di luar."


def render_weather(report: WeatherReport) -> str:
    """
    Render weather with an air-quality recommendation.

    Missing weather still shows the air quality when that part succeeded.
    """
    if report.weather is None:
        if _input_missing(report.weather_error):
            return location_required_text("cuaca dan kualitas udara")
        if report.aqi is None:
            return WEATHER_FAILURE_TEXT
        return f"{WEATHER_FAILURE_TEXT}\n\n{render_aqi_clause(report.aqi)}"

    weather = report.weather
    return (
        f"{GREETING}! Berdasarkan lokasi Anda di **{weather.city_label}** "
        f"(dari API OpenWeather/AQI Live):\n\n"
        f"• **Cuaca**: {weather.temp_celsius}°C, {weather.condition}\n"
        f"• **Kelembapan**: {weather.humidity_pct}%\n"
        f"• **Angin**: {weather.wind_speed:g} m/s\n\n"
        f"{render_aqi_clause(report.aqi)}"
    )


# ============================================================================
# Places
# ============================================================================

def render_places(result: ProviderResult[List[PlaceEntry]], intent: Intent) -> str:
    noun = PLACE_NOUNS.get(intent, "tempat")
    if _input_missing(result.error):
        return location_required_text(f"pencarian {noun} terdekat")

    entries = result.data or []
    if not entries:
        return f"Maaf, {noun} terdekat tidak ditemukan di lokasi Anda saat ini. (Live Foursquare)"

    lines = [
        f"{GREETING}! Berikut {len(entries)} rekomendasi **{noun} terdekat** "
        f"dari lokasi Anda (Data Live Foursquare):",
        "",
    ]
    for entry in entries[:5]:
        lines.append(f"• **{entry.name}** (~{entry.distance_meters}m)")
        lines.append(f"  *{entry.category} | {entry.address}*")
    return "\n".join(lines) + "\n"


# ============================================================================
# Shipping
# ============================================================================

def render_shipping(report: ShippingReport) -> str:
    """
    Render shipping offers cheapest first.

    Any error carried by the report (unknown city, missing key, provider
    failure, no offers) is returned verbatim.
    """
    if report.error is not None:
        return report.error.message or SHIPPING_FAILURE_TEXT

    lines = [
        f"{GREETING}! Berikut hasil cek ongkir **{report.origin_label}** ke "
        f"**{report.destination_label}** ({format_weight_kg(report.query.weight_grams)} kg) "
        f"dari API RajaOngkir (Live):",
        "",
    ]
    for offer in report.offers:
        lines.append(
            f"• **{offer.courier_code.upper()} ({offer.service_name})**: "
            f"{format_rupiah(offer.cost_value)} (Est. {strip_etd_unit(offer.etd_label)} hari)"
        )
    return "\n".join(lines) + "\n"
