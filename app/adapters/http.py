"""
Cliente HTTP compartido por los adapters de marketplaces

- Un solo lugar arma httpx.Client (base_url, headers, timeout)
- El transport es inyectable: los tests usan httpx.MockTransport
- Sin reintentos: cada llamada es best-effort y el caller decide
"""

from typing import Any, Dict, Optional
import logging

import httpx

from app.core.config import get_settings

logger = logging.getLogger(__name__)

_transport: Optional[httpx.BaseTransport] = None


class MarketplaceHTTPError(Exception):
    """Respuesta no exitosa (o fallo de red) de una API de marketplace"""

    def __init__(self, platform: str, status_code: Optional[int], message: str, payload: Any = None):
        self.platform = platform
        self.status_code = status_code
        self.message = message
        self.payload = payload
        super().__init__(f"[{platform}] {status_code}: {message}")


def set_transport(transport: Optional[httpx.BaseTransport]) -> None:
    """Reemplaza el transport de todos los clientes nuevos (None = red real)"""
    global _transport
    _transport = transport


def build_client(base_url: str = "", headers: Optional[Dict[str, str]] = None) -> httpx.Client:
    settings = get_settings()
    kwargs: Dict[str, Any] = {
        "base_url": base_url,
        "headers": headers or {},
        "timeout": settings.HTTP_TIMEOUT_SECONDS,
    }
    if _transport is not None:
        kwargs["transport"] = _transport
    return httpx.Client(**kwargs)


def parse_response(platform: str, response: httpx.Response) -> Any:
    """
    JSON de una respuesta 2xx

    Raises:
        MarketplaceHTTPError: status >= 400 (lleva el mensaje del upstream)
            o cuerpo 2xx que no es JSON
    """
    if response.status_code >= 400:
        try:
            payload = response.json()
        except ValueError:
            payload = response.text
        message = payload.get("message") if isinstance(payload, dict) else None
        raise MarketplaceHTTPError(platform, response.status_code, message or str(payload)[:200], payload)
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise MarketplaceHTTPError(
            platform, response.status_code, f"Respuesta no JSON: {response.text[:200]}", response.text
        ) from e


def send(platform: str, client: httpx.Client, method: str, url: str, **kwargs) -> Any:
    """Request + parse; los errores de red también salen como MarketplaceHTTPError"""
    try:
        response = client.request(method, url, **kwargs)
    except httpx.HTTPError as e:
        logger.warning(f"[{platform}] {method} {url} falló: {e}")
        raise MarketplaceHTTPError(platform, None, str(e)) from e
    return parse_response(platform, response)
