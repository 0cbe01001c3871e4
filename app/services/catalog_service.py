"""
CatalogService - Productos, variantes, colores y talles

Responsabilidades:
1. Listado paginado de productos con stock total agregado
2. Detalle por SKU con la matriz color × talle
3. Resolución de variante por (sku, color, talle)
4. Alta/edición de productos y variantes, vínculos externos
5. Catálogo de colores/talles tolerante a esquemas heredados
"""

from typing import Any, Dict, List, Optional
import logging
import random
import re

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.core.database import column_names, execute, get, has_column, has_table, query
from app.core.exceptions import (
    BaseAppException,
    DuplicateSkuException,
    DuplicateVariantException,
    ProductNotFoundException,
    ValidationException,
    VariantNotFoundException,
)
from app.models import Color, Product, ProductColor, ProductVariant, Size, Stock
from app.services.id_generator import IDGenerator
from app.services.stock_service import StockService

logger = logging.getLogger(__name__)

# Nombres de "color" heredados que en realidad son talles
SIZE_PATTERN = re.compile(r"^(U|P|M|G|GG|XG|XXG|XXXG|S|L|XL|XXL|XXXL|XS|ÚNICO|\d+)$", re.IGNORECASE)

SORT_FIELDS = ("sku", "name", "stock")
MAX_PER_PAGE = 200


def _external_ids(tienda_nube: Optional[str], mercado_libre: Optional[str]) -> Dict[str, Optional[str]]:
    return {"tiendaNube": tienda_nube, "mercadoLibre": mercado_libre}


def serialize_product(product: Product, stock_total: int = 0) -> Dict[str, Any]:
    return {
        "id": product.id,
        "sku": product.sku,
        "name": product.name,
        "category": product.category,
        "base_price": float(product.base_price or 0),
        "description": product.description,
        "stock_total": int(stock_total or 0),
        "externalIds": _external_ids(product.tienda_nube_id, product.mercado_libre_id),
    }


class CatalogService:
    """
    Service del catálogo mayorista

    Un producto tiene colores (ProductColor) y cada color tiene talles
    (ProductVariant). El stock vive por variante.
    """

    # ==================== PRODUCTOS ====================

    @staticmethod
    def _stock_totals_subquery():
        return (
            select(
                ProductColor.product_id.label("product_id"),
                func.coalesce(func.sum(Stock.stock), 0).label("stock_total"),
            )
            .join(ProductVariant, ProductVariant.product_color_id == ProductColor.id)
            .join(Stock, Stock.variant_id == ProductVariant.id)
            .group_by(ProductColor.product_id)
            .subquery()
        )

    @staticmethod
    def list_products(
        db: Session,
        page: int = 1,
        per_page: int = 50,
        search: Optional[str] = None,
        sort: str = "name",
        direction: str = "asc",
    ) -> Dict[str, Any]:
        """
        Listado paginado

        Returns:
            {"items", "page", "per_page", "total"}
        """
        page = max(1, page)
        per_page = min(max(1, per_page), MAX_PER_PAGE)
        if sort not in SORT_FIELDS:
            sort = "name"

        totals = CatalogService._stock_totals_subquery()
        stock_total = func.coalesce(totals.c.stock_total, 0)
        q = db.query(Product, stock_total).outerjoin(totals, totals.c.product_id == Product.id)

        if search:
            pattern = f"%{search.strip()}%"
            q = q.filter(or_(Product.sku.like(pattern), Product.name.like(pattern)))

        total = q.count()

        column = {"sku": Product.sku, "name": Product.name, "stock": stock_total}[sort]
        order = column.desc() if direction == "desc" else column.asc()
        rows = q.order_by(order, Product.id).offset((page - 1) * per_page).limit(per_page).all()

        return {
            "items": [serialize_product(p, s) for p, s in rows],
            "page": page,
            "per_page": per_page,
            "total": total,
        }

    @staticmethod
    def stock_total(db: Session, product_id: str) -> int:
        total = (
            db.query(func.coalesce(func.sum(Stock.stock), 0))
            .select_from(Stock)
            .join(ProductVariant, Stock.variant_id == ProductVariant.id)
            .join(ProductColor, ProductVariant.product_color_id == ProductColor.id)
            .filter(ProductColor.product_id == product_id)
            .scalar()
        )
        return int(total or 0)

    @staticmethod
    def get_product_by_sku(db: Session, sku: str) -> Dict[str, Any]:
        """Producto + variantes (color, talle, stock) ordenadas por color y talle"""
        product = db.query(Product).filter(Product.sku == sku).order_by(Product.created_at, Product.id).first()
        if not product:
            raise ProductNotFoundException(sku)

        rows = (
            db.query(ProductVariant, Color.code, Color.name, Size.size_code, Stock.stock)
            .join(ProductColor, ProductVariant.product_color_id == ProductColor.id)
            .join(Color, ProductColor.color_id == Color.id)
            .join(Size, ProductVariant.size_id == Size.id)
            .outerjoin(Stock, Stock.variant_id == ProductVariant.id)
            .filter(ProductColor.product_id == product.id)
            .order_by(Color.code, Size.size_code)
            .all()
        )

        variants = [
            {
                "variant_id": v.id,
                "sku": v.sku,
                "color_code": color_code,
                "color_name": color_name,
                "size_code": size_code,
                "stock": int(stock or 0),
                "tienda_nube_variant_id": v.tienda_nube_variant_id,
                "mercado_libre_variant_id": v.mercado_libre_variant_id,
                "externalIds": _external_ids(v.tienda_nube_variant_id, v.mercado_libre_variant_id),
            }
            for v, color_code, color_name, size_code, stock in rows
        ]

        data = serialize_product(product, sum(v["stock"] for v in variants))
        data["variants"] = variants
        return data

    @staticmethod
    def create_product(db: Session, data: Dict[str, Any]) -> Dict[str, Any]:
        sku = (data.get("sku") or "").strip()
        name = (data.get("name") or "").strip()
        if not sku or not name:
            raise ValidationException("SKU y Nombre son requeridos")

        if db.query(Product.id).filter(Product.sku == sku).first():
            raise DuplicateSkuException(sku)

        product = Product(
            id=IDGenerator.generate_product_id(),
            sku=sku,
            name=name,
            category=data.get("category"),
            base_price=data.get("base_price") or 0,
            description=data.get("description"),
        )
        db.add(product)
        db.commit()
        db.refresh(product)

        logger.info(f"✅ Producto creado: {sku} ({product.id})")
        return serialize_product(product)

    @staticmethod
    def update_product(db: Session, product_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Actualización parcial (campos None se conservan)"""
        product = db.get(Product, product_id)
        if not product:
            raise ProductNotFoundException(product_id)

        for field in ("name", "category", "base_price", "description"):
            if data.get(field) is not None:
                setattr(product, field, data[field])
        db.commit()
        db.refresh(product)
        return serialize_product(product, CatalogService.stock_total(db, product.id))

    @staticmethod
    def update_product_external_ids(
        db: Session,
        product_id: str,
        tienda_nube_id: Optional[str] = None,
        mercado_libre_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        product = db.get(Product, product_id)
        if not product:
            raise ProductNotFoundException(product_id)
        if tienda_nube_id is not None:
            product.tienda_nube_id = tienda_nube_id
        if mercado_libre_id is not None:
            product.mercado_libre_id = mercado_libre_id
        db.commit()
        return {"id": product.id, "externalIds": _external_ids(product.tienda_nube_id, product.mercado_libre_id)}

    @staticmethod
    def update_variant_external_ids(
        db: Session,
        variant_id: str,
        tienda_nube_variant_id: Optional[str] = None,
        mercado_libre_variant_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        variant = db.get(ProductVariant, variant_id)
        if not variant:
            raise VariantNotFoundException(variant_id)
        if tienda_nube_variant_id is not None:
            variant.tienda_nube_variant_id = tienda_nube_variant_id
        if mercado_libre_variant_id is not None:
            variant.mercado_libre_variant_id = mercado_libre_variant_id
        db.commit()
        return {
            "id": variant.id,
            "externalIds": _external_ids(variant.tienda_nube_variant_id, variant.mercado_libre_variant_id),
        }

    @staticmethod
    def delete_all(db: Session) -> Dict[str, int]:
        """
        Borrado total del catálogo (DELETE en bloque, hijos primero)

        Los pedidos y el log de movimientos no se tocan: order_items.variant_id
        y stock_movements.variant_id no tienen FK.
        """
        counts = {}
        for model in (Stock, ProductVariant, ProductColor, Product, Color, Size):
            counts[model.__tablename__] = db.query(model).delete(synchronize_session=False)
        db.commit()
        logger.warning(f"🗑️ Catálogo eliminado: {counts}")
        return counts

    # ==================== VARIANTES ====================

    @staticmethod
    def resolve_variant_id(db: Session, sku: str, color_code: str, size_code: str) -> Optional[str]:
        """
        (sku de producto, código de color, código de talle) → variant_id

        Orden por id de variante: con SKUs heredados duplicados el resultado
        es siempre el mismo.
        """
        row = (
            db.query(ProductVariant.id)
            .join(ProductColor, ProductVariant.product_color_id == ProductColor.id)
            .join(Product, ProductColor.product_id == Product.id)
            .join(Color, ProductColor.color_id == Color.id)
            .join(Size, ProductVariant.size_id == Size.id)
            .filter(Product.sku == sku, Color.code == color_code, Size.size_code == size_code)
            .order_by(ProductVariant.id)
            .first()
        )
        return row[0] if row else None

    @staticmethod
    def patch_stock(
        db: Session,
        stock: Optional[int],
        variant_id: Optional[str] = None,
        sku: Optional[str] = None,
        color_code: Optional[str] = None,
        size_code: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Ajuste manual de stock por variantId o sku+colorCode+sizeCode

        Se registra como AJUSTE_MANUAL y se propaga a los marketplaces.
        La referencia se valida antes que el stock (400 en ambos casos).
        """
        if not variant_id and not (sku and color_code and size_code):
            raise ValidationException("Debe enviar variantId o sku+colorCode+sizeCode")
        if stock is None or stock < 0:
            raise ValidationException("Stock inválido", details={"stock": stock})
        if not variant_id:
            variant_id = CatalogService.resolve_variant_id(db, sku, color_code, size_code)
        if not variant_id or db.get(ProductVariant, variant_id) is None:
            raise VariantNotFoundException(variant_id)

        if not StockService.update_variant_stock(db, variant_id, stock, "AJUSTE_MANUAL", "Ajuste manual"):
            raise BaseAppException("Error actualizando stock", details={"variant_id": variant_id}, status_code=500)
        return {"variant_id": variant_id, "stock": stock}

    @staticmethod
    def find_or_create_color(db: Session, name: str, code: Optional[str] = None) -> str:
        """
        Color por nombre exacto (o por código si se pasa); lo crea si falta

        Código nuevo = primeros 50 caracteres del nombre en mayúsculas. Si el
        código ya existe se agrega un sufijo numérico. Sin commit.
        """
        name = name.strip()
        if code:
            row = get(db, "SELECT id FROM colors WHERE code = :code", {"code": code})
            if row:
                return row["id"]
        row = get(db, "SELECT id FROM colors WHERE name = :name", {"name": name})
        if row:
            return row["id"]

        code = code or name[:50].upper()
        if get(db, "SELECT id FROM colors WHERE code = :code", {"code": code}):
            code = f"{code[:45]}{random.randint(0, 999)}"

        color_id = IDGenerator.generate_color_id()
        params = {"id": color_id, "code": code, "name": name, "hex": "#000000"}
        if has_column(db, "colors", "hex"):
            execute(db, "INSERT INTO colors (id, code, name, hex) VALUES (:id, :code, :name, :hex)", params)
        else:
            execute(db, "INSERT INTO colors (id, code, name) VALUES (:id, :code, :name)", params)
        logger.info(f"🎨 Color creado: {name} ({code})")
        return color_id

    @staticmethod
    def find_or_create_size(db: Session, size_code: str) -> str:
        """Talle por size_code exacto (máx. 100 caracteres); lo crea si falta. Sin commit."""
        size_code = size_code.strip()[:100]
        row = get(db, "SELECT id FROM sizes WHERE size_code = :code", {"code": size_code})
        if row:
            return row["id"]

        size_id = IDGenerator.generate_size_id()
        params = {"id": size_id, "code": size_code}
        if has_column(db, "sizes", "name"):
            execute(db, "INSERT INTO sizes (id, size_code, name) VALUES (:id, :code, :code)", params)
        else:
            execute(db, "INSERT INTO sizes (id, size_code) VALUES (:id, :code)", params)
        logger.info(f"📏 Talle creado: {size_code}")
        return size_id

    @staticmethod
    def get_or_create_product_color(db: Session, product_id: str, color_id: str) -> ProductColor:
        product_color = db.query(ProductColor).filter(
            ProductColor.product_id == product_id,
            ProductColor.color_id == color_id,
        ).first()
        if product_color is None:
            product_color = ProductColor(
                id=IDGenerator.generate_product_color_id(),
                product_id=product_id,
                color_id=color_id,
            )
            db.add(product_color)
            db.flush()
        return product_color

    @staticmethod
    def add_variant(
        db: Session,
        product_id: str,
        size_code: str,
        color_code: Optional[str] = None,
        color_name: Optional[str] = None,
        sku: Optional[str] = None,
        stock: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Alta manual de variante (crea color/talle si no existen)

        El stock inicial se registra como AJUSTE_MANUAL.
        """
        product = db.get(Product, product_id)
        if not product:
            raise ProductNotFoundException(product_id)
        if not size_code or not (color_code or color_name):
            raise ValidationException("Color y talle son requeridos")

        color_id = CatalogService.find_or_create_color(db, color_name or color_code, code=color_code)
        size_id = CatalogService.find_or_create_size(db, size_code)
        product_color = CatalogService.get_or_create_product_color(db, product.id, color_id)

        exists = db.query(ProductVariant.id).filter(
            ProductVariant.product_color_id == product_color.id,
            ProductVariant.size_id == size_id,
        ).first()
        if exists:
            db.rollback()
            raise DuplicateVariantException(product.id, color_code or color_name, size_code)

        variant = ProductVariant(
            id=IDGenerator.generate_variant_id(),
            product_color_id=product_color.id,
            size_id=size_id,
            sku=sku,
        )
        db.add(variant)
        db.flush()

        if stock is not None:
            StockService.write_stock(db, variant.id, stock, "AJUSTE_MANUAL", "Alta de variante")
        db.commit()

        logger.info(f"✅ Variante creada: {product.sku} {color_code or color_name}/{size_code}")
        return {"variant_id": variant.id, "product_id": product.id, "stock": stock or 0}

    # ==================== COLORES / TALLES ====================

    @staticmethod
    def list_colors(db: Session) -> List[Dict[str, Any]]:
        """
        Colores {id, code, name, hex} ordenados por nombre

        - colors sin columna hex → hex = null
        - sin tabla colors → tabla heredada attributes (type='color')
        - se filtran nombres que parecen talles
        """
        if has_table(db, "colors"):
            hex_expr = "hex" if has_column(db, "colors", "hex") else "NULL AS hex"
            rows = query(db, f"SELECT id, code, name, {hex_expr} FROM colors ORDER BY name")
        elif has_table(db, "attributes"):
            rows = query(
                db,
                "SELECT id, name AS code, name, value AS hex FROM attributes "
                "WHERE type = 'color' ORDER BY name",
            )
        else:
            return []

        return [
            {"id": r["id"], "code": r["code"], "name": r["name"], "hex": r["hex"]}
            for r in rows
            if not SIZE_PATTERN.match((r["name"] or "").strip())
        ]

    @staticmethod
    def list_sizes(db: Session) -> List[Dict[str, Any]]:
        """Talles {id, code, name} según las columnas que existan"""
        columns = column_names(db, "sizes")
        if columns:
            code_col = next((c for c in ("size_code", "code", "name") if c in columns), "id")
            name_col = "name" if "name" in columns else code_col
            rows = query(db, f"SELECT id, {code_col} AS code, {name_col} AS name FROM sizes ORDER BY {code_col}")
        elif has_table(db, "attributes"):
            rows = query(
                db,
                "SELECT id, name AS code, name FROM attributes WHERE type = 'size' ORDER BY name",
            )
        else:
            return []
        return [{"id": r["id"], "code": r["code"], "name": r["name"]} for r in rows]
