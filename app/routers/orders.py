"""
Router: ORDERS

Pedidos mayoristas

Estados: Borrador → Confirmado → Preparación → Despachado
         Confirmado → Cancelado

Efectos en stock (solo vía PATCH /status):
- Borrador → Confirmado: descuenta stock (PEDIDO_MAYORISTA)
- Confirmado → Cancelado: restaura stock (DEVOLUCION)
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.core.database import get_db
from app.core.security import require_auth
from app.schemas.order import (
    OrderDeleteResponse,
    OrderIn,
    OrderOut,
    OrderStatusResponse,
    OrderStatusUpdate,
)
from app.services.order_service import OrderService

router = APIRouter(prefix="/api/orders", tags=["Orders"], dependencies=[Depends(require_auth)])


@router.get("", response_model=List[OrderOut], summary="Listar pedidos (más nuevos primero)")
def list_orders(db: Session = Depends(get_db)):
    return OrderService.list_orders(db)


@router.get("/{order_id}", response_model=OrderOut, summary="Obtener pedido")
def get_order(order_id: str, db: Session = Depends(get_db)):
    return OrderService.get_order(db, order_id)


@router.post(
    "",
    response_model=OrderOut,
    status_code=status.HTTP_201_CREATED,
    summary="Crear pedido",
    description="""
    Crear pedido en estado Borrador

    Cada item se identifica por `variantId` o por `sku` + `colorCode` + `sizeCode`.
    Si algún item no se puede resolver no se guarda nada.

    **Ejemplo:**
    ```json
    {
      "customerId": "c-1",
      "sellerId": "u-2",
      "date": "2025-03-01",
      "total": 13500,
      "items": [{"sku": "LP-1001", "colorCode": "NEG", "sizeCode": "M", "quantity": 3, "priceAtMoment": 4500}]
    }
    ```
    """,
)
def create_order(body: OrderIn, db: Session = Depends(get_db)):
    return OrderService.create_order(db, body.model_dump(mode="json"))


@router.put(
    "/{order_id}",
    response_model=OrderOut,
    summary="Reemplazar pedido",
    description="Reemplaza cabecera e items (conserva `picked`). No modifica stock.",
)
def update_order(order_id: str, body: OrderIn, db: Session = Depends(get_db)):
    return OrderService.update_order(db, order_id, body.model_dump(mode="json"))


@router.patch(
    "/{order_id}/status",
    response_model=OrderStatusResponse,
    summary="Cambiar estado del pedido",
)
def update_order_status(order_id: str, body: OrderStatusUpdate, db: Session = Depends(get_db)):
    return OrderService.update_status(db, order_id, body.status.value)


@router.delete("/{order_id}", response_model=OrderDeleteResponse, summary="Eliminar pedido")
def delete_order(order_id: str, db: Session = Depends(get_db)):
    return OrderService.delete_order(db, order_id)
