"""
IntegrationService - Tienda Nube y Mercado Libre

Responsabilidades:
1. OAuth: URL de autorización, canje del code, estado y desconexión
2. Importación masiva de productos de Tienda Nube (idempotente, con poda)
3. Envío best-effort de stock a Mercado Libre buscando la publicación por SKU
4. Envío masivo de stock local a cada plataforma
5. Listado de órdenes de cada plataforma

Principios:
- Cada producto importado se confirma por separado (sin transacción global)
- Un error en una variante no frena la importación; queda en `logs`
- Si falló alguna variante de un producto, ese producto NO se poda
"""

from threading import Lock
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode
import logging

from fastapi import BackgroundTasks
from sqlalchemy import exists
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.adapters.http import MarketplaceHTTPError
from app.adapters.mercadolibre_adapter import MercadoLibreAdapter, MercadoLibreClient
from app.adapters.tiendanube_adapter import (
    DEFAULT_TOKEN_TTL,
    MAX_PAGES,
    PAGE_SIZE,
    TiendaNubeAdapter,
    TiendaNubeClient,
)
from app.core.config import get_settings
from app.core.exceptions import (
    ExternalServiceException,
    IntegrationNotConfiguredException,
    IntegrationNotConnectedException,
    SyncInProgressException,
    ValidationException,
)
from app.models import PLATFORMS, Product, ProductColor, ProductVariant, Stock, StockMovement
from app.services.catalog_service import CatalogService
from app.services.credential_store import CredentialStore
from app.services.id_generator import IDGenerator
from app.services.stock_service import StockService
from app.services.sync_tracker import SyncTracker

logger = logging.getLogger(__name__)

_import_lock = Lock()

PLATFORM_LABELS = {"tiendanube": "Tienda Nube", "mercadolibre": "Mercado Libre"}


class IntegrationService:

    # ==================== OAUTH ====================

    @staticmethod
    def validate_platform(platform: str) -> str:
        if platform not in PLATFORMS:
            raise ValidationException("Plataforma inválida", details={"platform": platform})
        return platform

    @staticmethod
    def get_auth_url(platform: str) -> str:
        """
        URL de autorización OAuth

        Raises:
            IntegrationNotConfiguredException: falta el App ID (500)
        """
        settings = get_settings()
        IntegrationService.validate_platform(platform)
        if platform == "mercadolibre":
            if not settings.MERCADO_LIBRE_APP_ID:
                raise IntegrationNotConfiguredException("Mercado Libre App ID not configured")
            return MercadoLibreClient.authorization_url(
                settings.MERCADO_LIBRE_APP_ID, settings.MERCADO_LIBRE_REDIRECT_URI
            )
        if not settings.TIENDA_NUBE_APP_ID:
            raise IntegrationNotConfiguredException("Tienda Nube App ID not configured")
        return TiendaNubeClient.authorization_url(settings.TIENDA_NUBE_APP_ID, settings.TIENDA_NUBE_REDIRECT_URI)

    @staticmethod
    def settings_redirect(platform: str, success: bool) -> str:
        settings = get_settings()
        query = urlencode({"status": "success" if success else "error", "platform": platform})
        return f"{settings.FRONTEND_URL}/#settings?{query}"

    @staticmethod
    def handle_callback(db: Session, platform: str, code: Optional[str]) -> str:
        """
        Canjear el code y guardar credenciales

        Returns:
            URL del frontend a la que redirigir (status=success|error)

        Raises:
            ValidationException: falta el code o la configuración de la app
        """
        settings = get_settings()
        IntegrationService.validate_platform(platform)

        if platform == "mercadolibre":
            configured = settings.MERCADO_LIBRE_APP_ID and settings.MERCADO_LIBRE_CLIENT_SECRET
        else:
            configured = settings.TIENDA_NUBE_APP_ID and settings.TIENDA_NUBE_CLIENT_SECRET
        if not code or not configured:
            raise ValidationException("Missing code or configuration", details={"platform": platform})

        try:
            if platform == "mercadolibre":
                data = MercadoLibreClient.exchange_code(
                    settings.MERCADO_LIBRE_APP_ID,
                    settings.MERCADO_LIBRE_CLIENT_SECRET,
                    code,
                    settings.MERCADO_LIBRE_REDIRECT_URI,
                )
                user_id = str(data["user_id"]) if data.get("user_id") is not None else None
                CredentialStore.save(
                    db, platform,
                    access_token=data["access_token"],
                    refresh_token=data.get("refresh_token"),
                    expires_in=data.get("expires_in"),
                    user_id=user_id,
                )
            else:
                data = TiendaNubeClient.exchange_code(
                    settings.TIENDA_NUBE_APP_ID, settings.TIENDA_NUBE_CLIENT_SECRET, code
                )
                store_id = str(data["user_id"]) if data.get("user_id") is not None else None
                CredentialStore.save(
                    db, platform,
                    access_token=data["access_token"],
                    expires_in=data.get("expires_in") or DEFAULT_TOKEN_TTL,
                    user_id=store_id,
                    store_id=store_id,
                )
        except (MarketplaceHTTPError, KeyError, TypeError) as e:
            logger.error(f"❌ OAuth {platform} falló: {e}")
            return IntegrationService.settings_redirect(platform, success=False)

        return IntegrationService.settings_redirect(platform, success=True)

    @staticmethod
    def status(db: Session) -> Dict[str, bool]:
        return CredentialStore.status(db)

    @staticmethod
    def disconnect(db: Session, platform: str) -> Dict[str, Any]:
        IntegrationService.validate_platform(platform)
        CredentialStore.delete(db, platform)
        return {"message": "Desconectado", "platform": platform}

    @staticmethod
    def require_credentials(db: Session, platform: str) -> Dict[str, Any]:
        credentials = CredentialStore.snapshot(db, platform)
        if not credentials:
            raise IntegrationNotConnectedException(
                f"No estás conectado a {PLATFORM_LABELS[platform]}", details={"platform": platform}
            )
        return credentials

    # ==================== IMPORTACIÓN TIENDA NUBE ====================

    @staticmethod
    def import_tiendanube_products(db: Session, background_tasks: Optional[BackgroundTasks] = None) -> Dict[str, Any]:
        """
        Importar el catálogo completo de Tienda Nube

        Páginas de 50 hasta página vacía, 404 o página 50. Re-ejecutar con los
        mismos datos no cambia conteos ni agrega movimientos.

        Raises:
            IntegrationNotConnectedException: sin credenciales de Tienda Nube
            SyncInProgressException: ya hay una importación corriendo
            ExternalServiceException: error de Tienda Nube distinto de 404
        """
        credentials = IntegrationService.require_credentials(db, "tiendanube")

        if not _import_lock.acquire(blocking=False):
            raise SyncInProgressException("tiendanube")
        try:
            return IntegrationService._run_import(db, credentials, background_tasks)
        finally:
            _import_lock.release()

    @staticmethod
    def _run_import(db: Session, credentials: Dict[str, Any], background_tasks: Optional[BackgroundTasks]) -> Dict[str, Any]:
        ml_credentials = CredentialStore.snapshot(db, "mercadolibre")
        logs: List[str] = []
        pending_pushes: List[Tuple[str, int]] = []
        imported = updated = deleted = 0

        with TiendaNubeClient(credentials["access_token"], credentials["store_id"]) as client:
            for page in range(1, MAX_PAGES + 1):
                try:
                    products = client.list_products(page, PAGE_SIZE)
                except MarketplaceHTTPError as e:
                    logger.error(f"[TN IMPORT] ❌ Página {page}: {e}")
                    raise ExternalServiceException(
                        f"Error sincronizando productos: {e.message}",
                        details={"page": page, "status": e.status_code},
                    ) from e
                if not products:
                    break

                logger.info(f"[TN IMPORT] Página {page}: {len(products)} productos")
                for tn_product in products:
                    try:
                        created, removed = IntegrationService._import_product(db, tn_product, pending_pushes, logs)
                    except (SQLAlchemyError, ValueError, TypeError, KeyError) as e:
                        db.rollback()
                        logger.error(f"[TN IMPORT] ❌ Producto {tn_product.get('id')}: {e}")
                        logs.append(f"❌ Producto {tn_product.get('id')}: {e}")
                        continue
                    if created:
                        imported += 1
                    else:
                        updated += 1
                    deleted += removed

        if ml_credentials and pending_pushes:
            if background_tasks is not None:
                background_tasks.add_task(IntegrationService.push_mercadolibre_stock_batch, ml_credentials, pending_pushes)
            else:
                IntegrationService.push_mercadolibre_stock_batch(ml_credentials, pending_pushes)
            logs.append(f"📤 {len(pending_pushes)} envíos de stock a Mercado Libre en cola")

        logger.info(f"[TN IMPORT] ✅ importados={imported} actualizados={updated} variantes eliminadas={deleted}")
        return {
            "message": "Sincronización completada",
            "imported": imported,
            "updated": updated,
            "deleted": deleted,
            "logs": logs,
        }

    @staticmethod
    def _import_product(
        db: Session,
        tn_product: Dict[str, Any],
        pending_pushes: List[Tuple[str, int]],
        logs: List[str],
    ) -> Tuple[bool, int]:
        """
        Upsert de un producto con sus variantes

        Returns:
            (creado, variantes podadas)
        """
        tn_id = str(tn_product["id"])
        name = TiendaNubeAdapter.product_name(tn_product)
        sku = TiendaNubeAdapter.default_sku(tn_product)
        description = TiendaNubeAdapter.product_description(tn_product)

        product = db.query(Product).filter(Product.tienda_nube_id == tn_id).first()
        if product is None:
            product = (
                db.query(Product)
                .filter(Product.sku == sku)
                .order_by(Product.created_at, Product.id)
                .first()
            )

        created = product is None
        if created:
            product = Product(
                id=IDGenerator.generate_product_id(),
                sku=sku,
                name=name,
                category="General",
                base_price=TiendaNubeAdapter.first_price(tn_product),
                description=description,
                tienda_nube_id=tn_id,
            )
            db.add(product)
        else:
            product.name = name
            product.tienda_nube_id = tn_id
            if description:
                product.description = description
        db.commit()
        product_id = product.id

        seen: set = set()
        failed = False
        for tn_variant in tn_product.get("variants") or []:
            try:
                variant_id, stock = IntegrationService._import_variant(db, product_id, tn_variant)
                db.commit()
            except (SQLAlchemyError, ValueError, TypeError, KeyError) as e:
                db.rollback()
                failed = True
                logger.warning(f"[TN IMPORT] ⚠️ Variante {tn_variant.get('id')} de {tn_id}: {e}")
                logs.append(f"⚠️ Variante {tn_variant.get('id')} de {name}: {e}")
                continue
            seen.add(variant_id)
            variant_sku = TiendaNubeAdapter.variant_sku(tn_variant)
            if variant_sku:
                pending_pushes.append((variant_sku, stock))

        if failed:
            logs.append(f"⚠️ {name}: poda omitida por errores en variantes")
            return created, 0

        removed = IntegrationService._prune_product(db, product_id, seen)
        db.commit()
        if removed:
            logs.append(f"🗑️ {name}: {removed} variantes eliminadas")
        return created, removed

    @staticmethod
    def _import_variant(db: Session, product_id: str, tn_variant: Dict[str, Any]) -> Tuple[str, int]:
        """Color, talle, variante y stock de una variante de TN (sin commit)"""
        tn_variant_id = str(tn_variant["id"])
        color_name, size_code = TiendaNubeAdapter.extract_color_and_size(tn_variant)

        color_id = CatalogService.find_or_create_color(db, color_name)
        size_id = CatalogService.find_or_create_size(db, size_code)
        product_color = CatalogService.get_or_create_product_color(db, product_id, color_id)

        variant = db.query(ProductVariant).filter(
            ProductVariant.product_color_id == product_color.id,
            ProductVariant.size_id == size_id,
        ).first()
        if variant is None:
            variant = ProductVariant(
                id=IDGenerator.generate_variant_id(),
                product_color_id=product_color.id,
                size_id=size_id,
            )
            db.add(variant)
        variant.tienda_nube_variant_id = tn_variant_id
        variant.sku = TiendaNubeAdapter.variant_sku(tn_variant) or variant.sku
        db.flush()

        stock = TiendaNubeAdapter.variant_stock(tn_variant)
        if StockService.get_stock(db, variant.id) != stock:
            StockService.write_stock(db, variant.id, stock, "IMPORTACION_TN", f"Importación TN: {tn_variant_id}")
        return variant.id, stock

    @staticmethod
    def _prune_product(db: Session, product_id: str, keep_variant_ids: set) -> int:
        """
        Eliminar variantes locales que ya no están en TN (con stock y movimientos)
        y los colores del producto que quedaron sin variantes
        """
        stale = [
            variant_id
            for (variant_id,) in db.query(ProductVariant.id)
            .join(ProductColor, ProductVariant.product_color_id == ProductColor.id)
            .filter(ProductColor.product_id == product_id)
            .all()
            if variant_id not in keep_variant_ids
        ]
        if stale:
            db.query(StockMovement).filter(StockMovement.variant_id.in_(stale)).delete(synchronize_session=False)
            db.query(Stock).filter(Stock.variant_id.in_(stale)).delete(synchronize_session=False)
            db.query(ProductVariant).filter(ProductVariant.id.in_(stale)).delete(synchronize_session=False)

        orphans = [
            pc_id
            for (pc_id,) in db.query(ProductColor.id)
            .filter(
                ProductColor.product_id == product_id,
                ~exists().where(ProductVariant.product_color_id == ProductColor.id),
            )
            .all()
        ]
        if orphans:
            db.query(ProductColor).filter(ProductColor.id.in_(orphans)).delete(synchronize_session=False)
        return len(stale)

    # ==================== MERCADO LIBRE POR SKU ====================

    @staticmethod
    def push_mercadolibre_stock_by_sku(credentials: Dict[str, Any], sku: str, stock: int) -> bool:
        """
        Buscar la publicación de ML por SKU y actualizar su stock

        - con variaciones: solo la variación cuyo seller_custom_field == sku
        - sin variaciones: la publicación
        Nunca lanza excepción; el resultado queda en SyncTracker.
        """
        try:
            with MercadoLibreClient(credentials["access_token"]) as client:
                item_ids = client.search_items_by_sku(credentials.get("user_id"), sku)
                if not item_ids:
                    logger.info(f"[ML SKU] Sin publicación para {sku}")
                    SyncTracker.record("mercadolibre", sku, stock, False, "Sin publicación para el SKU")
                    return False

                item_id = item_ids[0]
                item = client.get_item(item_id)
                if MercadoLibreAdapter.has_variations(item):
                    variation = MercadoLibreAdapter.find_variation_by_sku(item, sku)
                    if variation is None:
                        logger.info(f"[ML SKU] {item_id} no tiene variación con SKU {sku}")
                        SyncTracker.record("mercadolibre", f"{item_id}:{sku}", stock, False, "Sin variación para el SKU")
                        return False
                    client.update_variation_stock(item_id, variation["id"], stock)
                    target = f"{item_id}/{variation['id']}"
                else:
                    client.update_item_stock(item_id, stock)
                    target = item_id
        except (MarketplaceHTTPError, KeyError, TypeError) as e:
            logger.warning(f"[ML SKU] ⚠️ {sku}: {e}")
            SyncTracker.record("mercadolibre", sku, stock, False, str(e))
            return False

        SyncTracker.record("mercadolibre", target, stock, True)
        return True

    @staticmethod
    def push_mercadolibre_stock_batch(credentials: Dict[str, Any], pushes: List[Tuple[str, int]]) -> int:
        """Envía cada (sku, stock) en orden; devuelve cuántos se aplicaron"""
        return sum(
            1 for sku, stock in pushes
            if IntegrationService.push_mercadolibre_stock_by_sku(credentials, sku, stock)
        )

    # ==================== ENVÍO MASIVO DE STOCK ====================

    @staticmethod
    def _linked_variants(db: Session):
        return (
            db.query(ProductVariant, Product, Stock.stock)
            .join(ProductColor, ProductVariant.product_color_id == ProductColor.id)
            .join(Product, ProductColor.product_id == Product.id)
            .join(Stock, Stock.variant_id == ProductVariant.id)
            .order_by(Product.sku, ProductVariant.id)
            .all()
        )

    @staticmethod
    def push_all_stock_to_tiendanube(db: Session) -> Dict[str, Any]:
        """Stock local → Tienda Nube para toda variante vinculada"""
        credentials = IntegrationService.require_credentials(db, "tiendanube")
        updated, errors, logs = 0, 0, []

        for variant, product, stock in IntegrationService._linked_variants(db):
            if not (product.tienda_nube_id and variant.tienda_nube_variant_id):
                continue
            if StockService.push_tiendanube_stock(
                credentials, product.tienda_nube_id, variant.tienda_nube_variant_id, stock, variant.id
            ):
                updated += 1
            else:
                errors += 1
                logs.append(f"❌ {product.sku} ({variant.tienda_nube_variant_id})")

        return {"message": "Stock enviado a Tienda Nube", "updated": updated, "errors": errors, "logs": logs}

    @staticmethod
    def push_all_stock_to_mercadolibre(db: Session) -> Dict[str, Any]:
        """
        Stock local → Mercado Libre

        Usa publicación + variación si ambas están vinculadas; si no, busca por SKU
        de variante (que solo toca la publicación entera si no tiene variaciones).
        """
        credentials = IntegrationService.require_credentials(db, "mercadolibre")
        updated, errors, logs = 0, 0, []

        for variant, product, stock in IntegrationService._linked_variants(db):
            if product.mercado_libre_id and variant.mercado_libre_variant_id:
                ok = StockService.push_mercadolibre_stock(
                    credentials, product.mercado_libre_id, variant.mercado_libre_variant_id, stock, variant.id
                )
            elif variant.sku:
                ok = IntegrationService.push_mercadolibre_stock_by_sku(credentials, variant.sku, stock)
            else:
                continue
            if ok:
                updated += 1
            else:
                errors += 1
                logs.append(f"❌ {variant.sku or product.sku}")

        return {"message": "Stock enviado a Mercado Libre", "updated": updated, "errors": errors, "logs": logs}

    # ==================== ÓRDENES EXTERNAS ====================

    @staticmethod
    def list_tiendanube_orders(db: Session, page: int = 1, per_page: int = PAGE_SIZE) -> List[Dict[str, Any]]:
        credentials = IntegrationService.require_credentials(db, "tiendanube")
        try:
            with TiendaNubeClient(credentials["access_token"], credentials["store_id"]) as client:
                return client.list_orders(page=page, per_page=per_page)
        except MarketplaceHTTPError as e:
            raise ExternalServiceException(f"Error obteniendo órdenes de Tienda Nube: {e.message}") from e

    @staticmethod
    def list_mercadolibre_orders(db: Session, offset: int = 0, limit: int = 50) -> List[Dict[str, Any]]:
        credentials = IntegrationService.require_credentials(db, "mercadolibre")
        try:
            with MercadoLibreClient(credentials["access_token"]) as client:
                data = client.list_orders(credentials["user_id"], offset=offset, limit=limit)
        except MarketplaceHTTPError as e:
            raise ExternalServiceException(f"Error obteniendo órdenes de Mercado Libre: {e.message}") from e
        return data.get("results") or []
