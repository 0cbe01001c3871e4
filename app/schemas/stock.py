"""
Schemas para movimientos de stock y sincronización
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class MovementTypeEnum(str, Enum):
    """Tipos de movimiento de stock"""
    PEDIDO_MAYORISTA = "PEDIDO_MAYORISTA"
    VENTA_TIENDA_NUBE = "VENTA_TIENDA_NUBE"
    VENTA_MERCADO_LIBRE = "VENTA_MERCADO_LIBRE"
    AJUSTE_MANUAL = "AJUSTE_MANUAL"
    DEVOLUCION = "DEVOLUCION"
    IMPORTACION_TN = "IMPORTACION_TN"


class StockMovementOut(BaseModel):
    id: str
    variant_id: str
    previous_stock: int
    new_stock: int
    quantity_change: int
    movement_type: MovementTypeEnum
    reference: Optional[str] = None
    created_at: datetime
    variant_sku: Optional[str] = None
    product_name: Optional[str] = None
    product_sku: Optional[str] = None
    color_name: Optional[str] = None
    size_code: Optional[str] = None


class StockSyncResponse(BaseModel):
    message: str
    variant_id: str = Field(..., alias="variantId")
    stock: int

    class Config:
        populate_by_name = True


class SyncLogEntry(BaseModel):
    """Resultado de un envío de stock a un marketplace"""
    platform: str
    target: str
    variant_id: Optional[str] = Field(None, alias="variantId")
    stock: int
    success: bool
    error: Optional[str] = None
    at: str

    class Config:
        populate_by_name = True
