"""
TiendaNubeAdapter - Cliente y transformaciones de la API de Tienda Nube

Responsabilidad ÚNICA:
- Conocer el formato de Tienda Nube (nombres localizados, values de variantes)
- Hablar HTTP con api.tiendanube.com
- NO conoce lógica de negocio (eso vive en IntegrationService)
"""

from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode
import logging

from app.adapters.http import MarketplaceHTTPError, build_client, send
from app.core.config import get_settings

logger = logging.getLogger(__name__)

PLATFORM = "tiendanube"
API_BASE = "https://api.tiendanube.com/v1"
TOKEN_URL = "https://www.tiendanube.com/apps/authorize/token"
PAGE_SIZE = 50
MAX_PAGES = 50
DEFAULT_TOKEN_TTL = 31536000  # un año

DEFAULT_COLOR = "Único"
DEFAULT_SIZE = "U"


class TiendaNubeAdapter:
    """
    Transforma payloads de Tienda Nube al formato interno

    Todos los métodos son estáticos y toleran campos faltantes.
    """

    @staticmethod
    def localized(value: Any) -> str:
        """
        Texto de un campo localizado: es → pt → valor crudo

        Tienda Nube envía {"es": "Negro", "pt": "Preto"} o un string plano.
        """
        if value is None:
            return ""
        if isinstance(value, dict):
            for lang in ("es", "pt"):
                if value.get(lang):
                    return str(value[lang]).strip()
            for v in value.values():
                if v:
                    return str(v).strip()
            return ""
        return str(value).strip()

    @staticmethod
    def product_name(product: Dict[str, Any]) -> str:
        name = TiendaNubeAdapter.localized(product.get("name"))
        return name or f"Producto {product.get('id')}"

    @staticmethod
    def product_description(product: Dict[str, Any]) -> Optional[str]:
        description = TiendaNubeAdapter.localized(product.get("description"))
        return description or None

    @staticmethod
    def default_sku(product: Dict[str, Any]) -> str:
        """SKU de la primera variante, o TN-{id}"""
        variants = product.get("variants") or []
        if variants and variants[0].get("sku"):
            return str(variants[0]["sku"]).strip()
        return f"TN-{product.get('id')}"

    @staticmethod
    def first_price(product: Dict[str, Any]) -> float:
        variants = product.get("variants") or []
        if not variants:
            return 0.0
        try:
            return float(variants[0].get("price") or 0)
        except (TypeError, ValueError):
            return 0.0

    @staticmethod
    def extract_color_and_size(variant: Dict[str, Any]) -> Tuple[str, str]:
        """
        Heurística de atributos sobre `values`

        - sin values → (Único, U)
        - un value → (value, U)
        - dos o más → último = talle, el resto unido por espacios = color
        """
        values = [TiendaNubeAdapter.localized(v) for v in (variant.get("values") or [])]
        values = [v for v in values if v]
        if not values:
            return DEFAULT_COLOR, DEFAULT_SIZE
        if len(values) == 1:
            return values[0], DEFAULT_SIZE
        return " ".join(values[:-1]), values[-1]

    @staticmethod
    def variant_stock(variant: Dict[str, Any]) -> int:
        """stock null (stock infinito en TN) se toma como 0"""
        stock = variant.get("stock")
        if stock is None:
            return 0
        try:
            return max(0, int(stock))
        except (TypeError, ValueError):
            return 0

    @staticmethod
    def variant_sku(variant: Dict[str, Any]) -> Optional[str]:
        sku = variant.get("sku")
        return str(sku).strip() if sku else None


class TiendaNubeClient:
    """
    Cliente HTTP de la API de Tienda Nube

    Uso:
        with TiendaNubeClient(token, store_id) as client:
            products = client.list_products(page=1)
    """

    def __init__(self, access_token: str, store_id: str):
        settings = get_settings()
        self.store_id = store_id
        self._client = build_client(
            base_url=f"{API_BASE}/{store_id}",
            headers={
                "Authentication": f"bearer {access_token}",
                "User-Agent": settings.TIENDA_NUBE_USER_AGENT,
                "Content-Type": "application/json",
            },
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self._client.close()

    def list_products(self, page: int, per_page: int = PAGE_SIZE) -> Optional[List[Dict[str, Any]]]:
        """
        Página de productos

        Returns:
            Lista de productos, o None si TN responde 404 (fin del listado)
        """
        try:
            data = send(PLATFORM, self._client, "GET", "/products", params={"page": page, "per_page": per_page})
        except MarketplaceHTTPError as e:
            if e.status_code == 404:
                return None
            raise
        if data is None:
            return []
        if not isinstance(data, list) or not all(isinstance(p, dict) for p in data):
            raise MarketplaceHTTPError(PLATFORM, 200, "Listado de productos inesperado", data)
        return data

    def update_variant_stock(self, product_id: str, variant_id: str, stock: int) -> Any:
        logger.info(f"[TN STOCK] producto={product_id} variante={variant_id} stock={stock}")
        return send(
            PLATFORM, self._client, "PUT",
            f"/products/{product_id}/variants/{variant_id}",
            json={"stock": stock},
        )

    def list_orders(self, page: int = 1, per_page: int = PAGE_SIZE, status: Optional[str] = None) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"page": page, "per_page": per_page}
        if status:
            params["status"] = status
        return send(PLATFORM, self._client, "GET", "/orders", params=params) or []

    # ==================== OAUTH ====================

    @staticmethod
    def authorization_url(app_id: str, redirect_uri: str) -> str:
        query = urlencode({
            "response_type": "code",
            "scope": "write_products,read_products",
            "redirect_uri": redirect_uri,
        })
        return f"https://www.tiendanube.com/apps/{app_id}/authorize?{query}"

    @staticmethod
    def exchange_code(client_id: str, client_secret: str, code: str) -> Dict[str, Any]:
        """
        Canje del code OAuth

        Returns:
            {"access_token", "user_id", ...} (user_id = id de la tienda)
        """
        with build_client() as client:
            return send(PLATFORM, client, "POST", TOKEN_URL, json={
                "client_id": client_id,
                "client_secret": client_secret,
                "grant_type": "authorization_code",
                "code": code,
            })
