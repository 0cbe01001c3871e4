"""
Schemas para Orders (pedidos mayoristas)

Principio: Input validation + Output serialization
El frontend habla camelCase: los campos tienen alias y aceptan ambos nombres.
La validación de negocio (cliente e items obligatorios) la hace OrderService
para responder 400 con el mensaje esperado.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
import datetime
from enum import Enum


# ==================== ENUMS ====================

class OrderStatusEnum(str, Enum):
    """Estados de pedido"""
    BORRADOR = "Borrador"
    CONFIRMADO = "Confirmado"
    PREPARACION = "Preparación"
    DESPACHADO = "Despachado"
    CANCELADO = "Cancelado"


# ==================== REQUEST SCHEMAS ====================

class OrderItemIn(BaseModel):
    """
    Item de pedido

    Se identifica por variantId o por sku + colorCode + sizeCode.
    """
    variant_id: Optional[str] = Field(None, alias="variantId")
    sku: Optional[str] = None
    color_code: Optional[str] = Field(None, alias="colorCode")
    size_code: Optional[str] = Field(None, alias="sizeCode")
    quantity: int = Field(..., gt=0)
    picked: Optional[int] = Field(None, ge=0)
    price_at_moment: float = Field(0, ge=0, alias="priceAtMoment")

    class Config:
        populate_by_name = True


class OrderIn(BaseModel):
    """Crear o reemplazar un pedido"""
    customer_id: Optional[str] = Field(None, alias="customerId")
    seller_id: Optional[str] = Field(None, alias="sellerId")
    date: Optional[str] = None
    status: Optional[OrderStatusEnum] = None
    total: Optional[float] = Field(None, ge=0)
    picked_by: Optional[str] = Field(None, alias="pickedBy")
    items: List[OrderItemIn] = []

    class Config:
        populate_by_name = True


class OrderStatusUpdate(BaseModel):
    status: OrderStatusEnum


# ==================== RESPONSE SCHEMAS ====================

class OrderItemOut(BaseModel):
    variant_id: str = Field(..., alias="variantId")
    quantity: int
    picked: int
    price_at_moment: float = Field(..., alias="priceAtMoment")

    class Config:
        populate_by_name = True


class OrderOut(BaseModel):
    id: str
    customer_id: str = Field(..., alias="customerId")
    seller_id: Optional[str] = Field(None, alias="sellerId")
    date: datetime.date
    status: OrderStatusEnum
    total: float
    picked_by: Optional[str] = Field(None, alias="pickedBy")
    items: List[OrderItemOut]

    class Config:
        populate_by_name = True


class OrderStatusResponse(BaseModel):
    id: str
    status: OrderStatusEnum
    previous_status: OrderStatusEnum = Field(..., alias="previousStatus")

    class Config:
        populate_by_name = True


class OrderDeleteResponse(BaseModel):
    id: str
