"""
StockService - Stock local, log de movimientos y propagación a marketplaces

Responsabilidades:
1. update_variant_stock: fijar el stock de una variante y registrar el movimiento
2. Descontar / restaurar stock de un pedido mayorista
3. Propagar el stock a Tienda Nube / Mercado Libre (best-effort)
4. Consultar el log de movimientos

Principios:
- Todo cambio de stock deja un StockMovement (quantity_change = nuevo - anterior)
- La propagación externa nunca falla la operación local: solo loguea y registra
"""

from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Tuple
import logging

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.adapters.http import MarketplaceHTTPError
from app.adapters.mercadolibre_adapter import MercadoLibreClient
from app.adapters.tiendanube_adapter import TiendaNubeClient
from app.core.exceptions import VariantNotFoundException
from app.models import Color, Order, Product, ProductColor, ProductVariant, Size, Stock, StockMovement
from app.services.credential_store import CredentialStore
from app.services.id_generator import IDGenerator
from app.services.sync_tracker import SyncTracker

logger = logging.getLogger(__name__)


class StockService:
    """
    Service para stock por variante

    TIPOS DE MOVIMIENTO:
    - PEDIDO_MAYORISTA: confirmación de pedido (descuento)
    - VENTA_TIENDA_NUBE / VENTA_MERCADO_LIBRE: ventas externas
    - AJUSTE_MANUAL: edición desde el panel
    - DEVOLUCION: cancelación de pedido (restauración)
    - IMPORTACION_TN: importación de catálogo de Tienda Nube
    """

    # ==================== ESCRITURA ====================

    @staticmethod
    def get_stock(db: Session, variant_id: str) -> Optional[int]:
        """Stock actual o None si la variante no tiene fila de stock"""
        row = db.get(Stock, variant_id)
        return row.stock if row else None

    @staticmethod
    def write_stock(
        db: Session,
        variant_id: str,
        new_stock: int,
        movement_type: str,
        reference: Optional[str] = None,
    ) -> Tuple[int, int]:
        """
        Upsert de stock + movimiento, SIN commit (lo hace el caller)

        Returns:
            (stock anterior, stock nuevo)
        """
        row = db.get(Stock, variant_id)
        previous = row.stock if row else 0
        if row is None:
            row = Stock(variant_id=variant_id, stock=new_stock)
            db.add(row)
        else:
            row.stock = new_stock

        db.add(StockMovement(
            id=IDGenerator.generate_movement_id(),
            variant_id=variant_id,
            previous_stock=previous,
            new_stock=new_stock,
            quantity_change=new_stock - previous,
            movement_type=movement_type,
            reference=reference,
        ))
        db.flush()
        logger.info(f"📦 Stock {variant_id}: {previous} → {new_stock} ({movement_type})")
        return previous, new_stock

    @staticmethod
    def update_variant_stock(
        db: Session,
        variant_id: str,
        new_stock: int,
        movement_type: str,
        reference: Optional[str] = None,
        sync_external: bool = True,
    ) -> bool:
        """
        Fijar el stock de una variante (commit incluido)

        Returns:
            True si se escribió, False si falló (el error queda logueado)
        """
        try:
            if db.get(ProductVariant, variant_id) is None:
                logger.error(f"❌ Variante inexistente: {variant_id}")
                return False
            StockService.write_stock(db, variant_id, new_stock, movement_type, reference)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Error actualizando stock de {variant_id}: {e}")
            return False

        if sync_external:
            StockService.sync_stock_to_external_platforms(db, variant_id, new_stock)
        return True

    # ==================== PEDIDOS ====================

    @staticmethod
    def deduct_stock_for_order(db: Session, order_id: str) -> Tuple[bool, List[str]]:
        """
        Descontar cada item del pedido (nunca por debajo de 0)

        Returns:
            (success, errores por item)
        """
        errors: List[str] = []
        order = db.get(Order, order_id)
        items = [(i.variant_id, i.quantity) for i in order.items] if order else []

        for variant_id, quantity in items:
            current = StockService.get_stock(db, variant_id) or 0
            new_stock = max(0, current - quantity)
            ok = StockService.update_variant_stock(
                db, variant_id, new_stock, "PEDIDO_MAYORISTA", f"Pedido: {order_id}"
            )
            if not ok:
                errors.append(f"Error actualizando stock para variante {variant_id}")

        return len(errors) == 0, errors

    @staticmethod
    def restore_stock_for_order(db: Session, order_id: str) -> Tuple[bool, List[str]]:
        """Devolver al stock la cantidad de cada item del pedido"""
        errors: List[str] = []
        order = db.get(Order, order_id)
        items = [(i.variant_id, i.quantity) for i in order.items] if order else []

        for variant_id, quantity in items:
            current = StockService.get_stock(db, variant_id) or 0
            ok = StockService.update_variant_stock(
                db, variant_id, current + quantity, "DEVOLUCION", f"Cancelación pedido: {order_id}"
            )
            if not ok:
                errors.append(f"Error restaurando stock para variante {variant_id}")

        return len(errors) == 0, errors

    # ==================== PROPAGACIÓN EXTERNA ====================

    @staticmethod
    def sync_stock_to_external_platforms(db: Session, variant_id: str, stock: int) -> Dict[str, Optional[bool]]:
        """
        Empujar el stock a las plataformas vinculadas

        Cada plataforma es independiente. Nunca lanza excepción.

        Returns:
            {"tiendanube": True/False/None, "mercadolibre": True/False/None}
            (None = sin vínculo o sin credenciales)
        """
        result: Dict[str, Optional[bool]] = {"tiendanube": None, "mercadolibre": None}

        row = (
            db.query(ProductVariant, Product)
            .join(ProductColor, ProductVariant.product_color_id == ProductColor.id)
            .join(Product, ProductColor.product_id == Product.id)
            .filter(ProductVariant.id == variant_id)
            .first()
        )
        if not row:
            logger.warning(f"⚠️ Sync externo: variante {variant_id} no encontrada")
            return result
        variant, product = row

        if product.tienda_nube_id and variant.tienda_nube_variant_id:
            credentials = CredentialStore.snapshot(db, "tiendanube")
            if credentials:
                result["tiendanube"] = StockService.push_tiendanube_stock(
                    credentials, product.tienda_nube_id, variant.tienda_nube_variant_id, stock, variant_id
                )

        # Solo por variación: la publicación entera suma todos los talles
        if product.mercado_libre_id and variant.mercado_libre_variant_id:
            credentials = CredentialStore.snapshot(db, "mercadolibre")
            if credentials:
                result["mercadolibre"] = StockService.push_mercadolibre_stock(
                    credentials, product.mercado_libre_id, variant.mercado_libre_variant_id, stock, variant_id
                )

        return result

    @staticmethod
    def push_tiendanube_stock(
        credentials: Dict[str, Any],
        product_id: str,
        tn_variant_id: str,
        stock: int,
        variant_id: Optional[str] = None,
    ) -> bool:
        target = f"{product_id}/{tn_variant_id}"
        try:
            with TiendaNubeClient(credentials["access_token"], credentials["store_id"]) as client:
                client.update_variant_stock(product_id, tn_variant_id, stock)
        except MarketplaceHTTPError as e:
            logger.warning(f"[TN STOCK] ⚠️ Falló {target}: {e}")
            SyncTracker.record("tiendanube", target, stock, False, str(e), variant_id)
            return False
        SyncTracker.record("tiendanube", target, stock, True, variant_id=variant_id)
        return True

    @staticmethod
    def push_mercadolibre_stock(
        credentials: Dict[str, Any],
        item_id: str,
        variation_id: str,
        stock: int,
        variant_id: Optional[str] = None,
    ) -> bool:
        """PUT del stock de una variación de ML (nunca de la publicación entera)"""
        target = f"{item_id}/{variation_id}"
        try:
            with MercadoLibreClient(credentials["access_token"]) as client:
                client.update_variation_stock(item_id, variation_id, stock)
        except MarketplaceHTTPError as e:
            logger.warning(f"[ML STOCK] ⚠️ Falló {target}: {e}")
            SyncTracker.record("mercadolibre", target, stock, False, str(e), variant_id)
            return False
        SyncTracker.record("mercadolibre", target, stock, True, variant_id=variant_id)
        return True

    @staticmethod
    def sync_variant(db: Session, variant_id: str) -> Dict[str, Any]:
        """Re-empujar el stock actual de una variante (POST /stock/sync/{id})"""
        stock = StockService.get_stock(db, variant_id)
        if stock is None:
            raise VariantNotFoundException(variant_id)
        StockService.sync_stock_to_external_platforms(db, variant_id, stock)
        return {"message": "Sincronización iniciada", "variantId": variant_id, "stock": stock}

    # ==================== CONSULTAS ====================

    @staticmethod
    def get_movements(
        db: Session,
        variant_id: Optional[str] = None,
        movement_type: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 50,
    ) -> List[Dict[str, Any]]:
        """Movimientos más nuevos primero, con producto/color/talle"""
        q = (
            db.query(StockMovement, ProductVariant.sku, Product.name, Product.sku, Color.name, Size.size_code)
            .outerjoin(ProductVariant, StockMovement.variant_id == ProductVariant.id)
            .outerjoin(ProductColor, ProductVariant.product_color_id == ProductColor.id)
            .outerjoin(Product, ProductColor.product_id == Product.id)
            .outerjoin(Color, ProductColor.color_id == Color.id)
            .outerjoin(Size, ProductVariant.size_id == Size.id)
        )
        if variant_id:
            q = q.filter(StockMovement.variant_id == variant_id)
        if movement_type:
            q = q.filter(StockMovement.movement_type == movement_type)
        if date_from:
            q = q.filter(StockMovement.created_at >= datetime.combine(date_from, time.min))
        if date_to:
            q = q.filter(StockMovement.created_at <= datetime.combine(date_to, time.max))

        rows = q.order_by(StockMovement.created_at.desc()).limit(limit).all()

        return [
            {
                "id": m.id,
                "variant_id": m.variant_id,
                "previous_stock": m.previous_stock,
                "new_stock": m.new_stock,
                "quantity_change": m.quantity_change,
                "movement_type": m.movement_type,
                "reference": m.reference,
                "created_at": m.created_at,
                "variant_sku": variant_sku,
                "product_name": product_name,
                "product_sku": product_sku,
                "color_name": color_name,
                "size_code": size_code,
            }
            for m, variant_sku, product_name, product_sku, color_name, size_code in rows
        ]
