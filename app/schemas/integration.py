"""
Schemas para integraciones (OAuth, importación, envío de stock)
"""

from pydantic import BaseModel
from typing import List


class AuthUrlResponse(BaseModel):
    url: str


class IntegrationStatus(BaseModel):
    mercadolibre: bool
    tiendanube: bool


class DisconnectResponse(BaseModel):
    message: str
    platform: str


class ImportResult(BaseModel):
    """Resultado de la importación de Tienda Nube"""
    message: str
    imported: int
    updated: int
    deleted: int
    logs: List[str]


class StockPushResult(BaseModel):
    """Resultado del envío masivo de stock a un marketplace"""
    message: str
    updated: int
    errors: int
    logs: List[str]
