"""
OrderService - Pedidos mayoristas y máquina de estados

Responsabilidades:
1. Alta / reemplazo / baja de pedidos con sus items
2. Resolver items por variantId o sku + colorCode + sizeCode ANTES de escribir
3. Transiciones de estado con efecto en stock:
   - Borrador → Confirmado: descuenta stock (una pasada)
   - Confirmado → Cancelado: restaura stock (una pasada)
   - cualquier otro par: solo cambia el estado
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import BaseAppException, OrderNotFoundException, ValidationException
from app.models import ORDER_STATUSES, Order, OrderItem
from app.services.catalog_service import CatalogService
from app.services.id_generator import IDGenerator
from app.services.stock_service import StockService

logger = logging.getLogger(__name__)

INVALID_ORDER = "Datos de pedido inválidos"
MISSING_ITEM_REFERENCE = "Falta variantId o sku+colorCode+sizeCode en item"


def serialize_order(order: Order) -> Dict[str, Any]:
    return {
        "id": order.id,
        "customer_id": order.customer_id,
        "seller_id": order.seller_id,
        "date": order.date,
        "status": order.status,
        "total": float(order.total or 0),
        "picked_by": order.picked_by,
        "items": [
            {
                "variant_id": item.variant_id,
                "quantity": item.quantity,
                "picked": item.picked or 0,
                "price_at_moment": float(item.price_at_moment or 0),
            }
            for item in order.items
        ],
    }


def parse_order_date(value: Any) -> date:
    """Fecha del pedido; vacía o inválida → hoy"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            logger.warning(f"⚠️ Fecha de pedido inválida '{value}', se usa hoy")
    return date.today()


class OrderService:

    # ==================== HELPERS ====================

    @staticmethod
    def _get_or_404(db: Session, order_id: str) -> Order:
        order = (
            db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.id == order_id)
            .first()
        )
        if not order:
            raise OrderNotFoundException(order_id)
        return order

    @staticmethod
    def _resolve_items(db: Session, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Resolver cada item a un variant_id (no escribe nada)

        Raises:
            ValidationException: item sin referencia o referencia inexistente
        """
        resolved = []
        for position, item in enumerate(items):
            variant_id = item.get("variant_id")
            if not variant_id:
                sku, color_code, size_code = item.get("sku"), item.get("color_code"), item.get("size_code")
                if not (sku and color_code and size_code):
                    raise ValidationException(MISSING_ITEM_REFERENCE, details={"item": position})
                variant_id = CatalogService.resolve_variant_id(db, sku, color_code, size_code)
                if not variant_id:
                    raise ValidationException(
                        MISSING_ITEM_REFERENCE,
                        details={"item": position, "sku": sku, "colorCode": color_code, "sizeCode": size_code},
                    )
            resolved.append({
                "variant_id": variant_id,
                "quantity": int(item["quantity"]),
                "picked": int(item.get("picked") or 0),
                "price_at_moment": Decimal(str(item.get("price_at_moment") or 0)),
                "position": position,
            })
        return resolved

    @staticmethod
    def _build_items(order_id: str, resolved: List[Dict[str, Any]]) -> List[OrderItem]:
        return [
            OrderItem(id=IDGenerator.generate_order_item_id(), order_id=order_id, **item)
            for item in resolved
        ]

    # ==================== CONSULTAS ====================

    @staticmethod
    def list_orders(db: Session) -> List[Dict[str, Any]]:
        """Pedidos más nuevos primero, items en una sola consulta extra"""
        orders = (
            db.query(Order)
            .options(selectinload(Order.items))
            .order_by(Order.date.desc(), Order.created_at.desc())
            .all()
        )
        return [serialize_order(o) for o in orders]

    @staticmethod
    def get_order(db: Session, order_id: str) -> Dict[str, Any]:
        return serialize_order(OrderService._get_or_404(db, order_id))

    # ==================== ESCRITURA ====================

    @staticmethod
    def create_order(db: Session, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Crear pedido (estado Borrador salvo que se indique otro)

        Todos los items se resuelven antes de insertar: o entra el pedido
        completo o no entra nada.
        """
        items = data.get("items") or []
        if not data.get("customer_id") or not items:
            raise ValidationException(INVALID_ORDER)

        resolved = OrderService._resolve_items(db, items)

        order = Order(
            id=IDGenerator.generate_order_id(),
            customer_id=data["customer_id"],
            seller_id=data.get("seller_id"),
            date=parse_order_date(data.get("date")),
            status=data.get("status") or "Borrador",
            total=Decimal(str(data.get("total") or 0)),
            picked_by=data.get("picked_by"),
        )
        order.items = OrderService._build_items(order.id, resolved)
        db.add(order)
        db.commit()

        logger.info(f"✅ Pedido creado: {order.id} ({len(resolved)} items)")
        return serialize_order(OrderService._get_or_404(db, order.id))

    @staticmethod
    def update_order(db: Session, order_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Reemplazar cabecera e items

        Conserva el `picked` enviado por la vista de armado. No toca stock.
        """
        order = OrderService._get_or_404(db, order_id)
        items = data.get("items") or []
        if not data.get("customer_id") or not items:
            raise ValidationException(INVALID_ORDER)

        resolved = OrderService._resolve_items(db, items)

        try:
            order.customer_id = data["customer_id"]
            order.seller_id = data.get("seller_id")
            order.date = parse_order_date(data.get("date") or order.date)
            if data.get("status"):
                order.status = data["status"]
            order.total = Decimal(str(data.get("total") or 0))
            order.picked_by = data.get("picked_by")
            order.items.clear()
            db.flush()
            order.items.extend(OrderService._build_items(order.id, resolved))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Error actualizando pedido {order_id}: {e}")
            raise BaseAppException("Error actualizando pedido", details={"order_id": order_id}, status_code=500) from e

        logger.info(f"✏️ Pedido actualizado: {order_id}")
        return serialize_order(OrderService._get_or_404(db, order_id))

    @staticmethod
    def update_status(db: Session, order_id: str, new_status: str) -> Dict[str, Any]:
        """
        Cambiar estado

        Los errores de stock se loguean; el estado se escribe igual.
        """
        if new_status not in ORDER_STATUSES:
            raise ValidationException("Estado inválido", details={"status": new_status})

        order = OrderService._get_or_404(db, order_id)
        previous_status = order.status

        if previous_status == "Borrador" and new_status == "Confirmado":
            ok, errors = StockService.deduct_stock_for_order(db, order_id)
            if not ok:
                logger.error(f"❌ Descuento de stock incompleto para {order_id}: {errors}")
        elif previous_status == "Confirmado" and new_status == "Cancelado":
            ok, errors = StockService.restore_stock_for_order(db, order_id)
            if not ok:
                logger.error(f"❌ Restauración de stock incompleta para {order_id}: {errors}")

        order = OrderService._get_or_404(db, order_id)
        order.status = new_status
        db.commit()

        logger.info(f"🔄 Pedido {order_id}: {previous_status} → {new_status}")
        return {"id": order_id, "status": new_status, "previous_status": previous_status}

    @staticmethod
    def delete_order(db: Session, order_id: str) -> Dict[str, Any]:
        order = OrderService._get_or_404(db, order_id)
        db.delete(order)
        db.commit()
        logger.info(f"🗑️ Pedido eliminado: {order_id}")
        return {"id": order_id}
