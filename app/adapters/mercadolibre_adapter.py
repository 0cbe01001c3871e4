"""
MercadoLibreAdapter - Cliente de la API de Mercado Libre

Cubre OAuth, búsqueda de publicaciones por SKU del vendedor,
actualización de stock (publicación o variación) y listado de órdenes.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode
import logging

from app.adapters.http import build_client, send

logger = logging.getLogger(__name__)

PLATFORM = "mercadolibre"
API_BASE = "https://api.mercadolibre.com"
AUTH_URL = "https://auth.mercadolibre.com.ar/authorization"
TOKEN_URL = "https://api.mercadolibre.com/oauth/token"


class MercadoLibreAdapter:
    """Transformaciones sobre payloads de Mercado Libre"""

    @staticmethod
    def find_variation_by_sku(item: Dict[str, Any], sku: str) -> Optional[Dict[str, Any]]:
        for variation in item.get("variations") or []:
            if str(variation.get("seller_custom_field") or "") == sku:
                return variation
        return None

    @staticmethod
    def has_variations(item: Dict[str, Any]) -> bool:
        return bool(item.get("variations"))


class MercadoLibreClient:
    """
    Cliente HTTP de Mercado Libre (Authorization: Bearer)

    Uso:
        with MercadoLibreClient(token) as client:
            ids = client.search_items_by_sku(user_id, "LP-1001")
    """

    def __init__(self, access_token: str):
        self._client = build_client(
            base_url=API_BASE,
            headers={"Authorization": f"Bearer {access_token}"},
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self._client.close()

    def search_items_by_sku(self, user_id: str, sku: str) -> List[str]:
        data = send(PLATFORM, self._client, "GET", f"/users/{user_id}/items/search", params={"seller_sku": sku})
        return list((data or {}).get("results") or [])

    def get_item(self, item_id: str) -> Dict[str, Any]:
        return send(PLATFORM, self._client, "GET", f"/items/{item_id}") or {}

    def update_item_stock(self, item_id: str, stock: int) -> Any:
        logger.info(f"[ML STOCK] item={item_id} stock={stock}")
        return send(PLATFORM, self._client, "PUT", f"/items/{item_id}", json={"available_quantity": stock})

    def update_variation_stock(self, item_id: str, variation_id: str, stock: int) -> Any:
        logger.info(f"[ML STOCK] item={item_id} variación={variation_id} stock={stock}")
        return send(
            PLATFORM, self._client, "PUT",
            f"/items/{item_id}/variations/{variation_id}",
            json={"available_quantity": stock},
        )

    def list_orders(self, seller_id: str, offset: int = 0, limit: int = 50) -> Dict[str, Any]:
        return send(
            PLATFORM, self._client, "GET", "/orders/search",
            params={"seller": seller_id, "sort": "date_desc", "offset": offset, "limit": limit},
        ) or {}

    # ==================== OAUTH ====================

    @staticmethod
    def authorization_url(app_id: str, redirect_uri: str) -> str:
        query = urlencode({
            "response_type": "code",
            "client_id": app_id,
            "redirect_uri": redirect_uri,
        })
        return f"{AUTH_URL}?{query}"

    @staticmethod
    def exchange_code(client_id: str, client_secret: str, code: str, redirect_uri: str) -> Dict[str, Any]:
        """
        Returns:
            {"access_token", "refresh_token", "expires_in", "user_id", ...}
        """
        with build_client() as client:
            return send(PLATFORM, client, "POST", TOKEN_URL, data={
                "grant_type": "authorization_code",
                "client_id": client_id,
                "client_secret": client_secret,
                "code": code,
                "redirect_uri": redirect_uri,
            }, headers={"Accept": "application/json"})
