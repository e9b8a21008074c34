"""
Shipping-cost adapter (RajaOngkir starter).

One POST asks three couriers (JNE, TIKI, SiCepat) at once. Failures carry a
ready-to-show Indonesian message, echoing RajaOngkir's own status
description when it sent one.
"""
from typing import Optional

from siska.core.config import Settings
from siska.core.logging import get_logger
from siska.models.domain import CourierQuote, ShippingOffer, ShippingQuote
from siska.services.providers.base import (
    FailureKind,
    ProviderCallError,
    ProviderClient,
    ProviderResult,
)
from siska.services.providers.schemas import (
    RajaOngkirResponse,
    SchemaValidationError,
    validate_payload,
)
from siska.services.shipping.cities import ResolvedCity

logger = get_logger(__name__)

PROVIDER_NAME = "shipping_cost"
RAJAONGKIR_COST_URL = "https://api.rajaongkir.com/starter/cost"
COURIERS = ("jne", "tiki", "sicepat")

MISSING_KEY_MESSAGE = "API Key RajaOngkir tidak disetel di server."
CIRCUIT_OPEN_MESSAGE = "Layanan RajaOngkir sedang tidak tersedia untuk sementara. Silakan coba lagi beberapa saat lagi."


def _provider_error_message(exc: ProviderCallError) -> str:
    if exc.outcome == "http_error":
        body = exc.response_json().get("rajaongkir") or {}
        status = body.get("status") if isinstance(body, dict) else None
        description = status.get("description") if isinstance(status, dict) else None
        return f"API RajaOngkir error: {description or 'Unknown error'}"
    if exc.outcome == "circuit_open":
        return CIRCUIT_OPEN_MESSAGE
    if exc.outcome == "invalid_payload":
        return "API RajaOngkir error: respons tidak valid"
    return f"Gagal terhubung ke API RajaOngkir: {exc}"


class ShippingCostAdapter:
    """Request shipping quotes for a city pair and weight."""

    def __init__(self, settings: Settings, client: Optional[ProviderClient] = None):
        self.settings = settings
        self.client = client or ProviderClient(PROVIDER_NAME, timeout_seconds=settings.provider_timeout_seconds)

    async def fetch(
        self,
        origin: ResolvedCity,
        destination: ResolvedCity,
        weight_grams: int,
    ) -> ProviderResult[ShippingQuote]:
        if not self.settings.rajaongkir_key:
            logger.error("shipping_cost_api_key_missing")
            return ProviderResult.failure(FailureKind.PROVIDER_UNAVAILABLE, PROVIDER_NAME, MISSING_KEY_MESSAGE)

        body = {
            "origin": origin.city_id,
            "destination": destination.city_id,
            "weight": weight_grams,
            "courier": ":".join(COURIERS),
        }
        headers = {
            "key": self.settings.rajaongkir_key,
            "content-type": "application/json",
        }
        try:
            payload = await self.client.request("POST", RAJAONGKIR_COST_URL, json=body, headers=headers)
            decoded = validate_payload(PROVIDER_NAME, RajaOngkirResponse, payload).rajaongkir
        except ProviderCallError as exc:
            message = _provider_error_message(exc)
            logger.warning("shipping_cost_unavailable", outcome=exc.outcome, message=message)
            return ProviderResult.failure(FailureKind.PROVIDER_UNAVAILABLE, PROVIDER_NAME, message)
        except SchemaValidationError as exc:
            logger.warning("shipping_cost_payload_invalid", error=str(exc))
            return ProviderResult.failure(
                FailureKind.PROVIDER_UNAVAILABLE,
                PROVIDER_NAME,
                "API RajaOngkir error: respons tidak valid",
            )

        couriers = []
        for courier in decoded.results:
            offers = [
                ShippingOffer(
                    courier_code=courier.code,
                    service_name=service.service,
                    description=service.description,
                    cost_value=service.cost[0].value,
                    etd_label=service.cost[0].etd,
                )
                for service in courier.costs
                if service.cost
            ]
            couriers.append(CourierQuote(code=courier.code, name=courier.name, offers=offers))

        origin_details = decoded.origin_details
        destination_details = decoded.destination_details
        quote = ShippingQuote(
            origin_label=(origin_details.city_name if origin_details else None) or origin.label,
            destination_label=(destination_details.city_name if destination_details else None) or destination.label,
            weight_grams=weight_grams,
            couriers=couriers,
        )
        return ProviderResult.success(quote)
