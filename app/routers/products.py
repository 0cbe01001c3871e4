"""
Router: PRODUCTS

Endpoints del catálogo mayorista

Características:
- Listado paginado con stock total y búsqueda por SKU/nombre
- Detalle por SKU con matriz color × talle
- Ajuste manual de stock (propaga a marketplaces)
- Vínculos con Tienda Nube / Mercado Libre
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from app.core.database import get_db
from app.core.security import require_auth
from app.schemas.product import (
    DeleteAllResponse,
    ExternalIdsResponse,
    ProductCreate,
    ProductDetail,
    ProductExternalIdsUpdate,
    ProductOut,
    ProductPage,
    ProductUpdate,
    StockPatch,
    StockPatchResponse,
    VariantCreate,
    VariantCreateResponse,
    VariantExternalIdsUpdate,
)
from app.services.catalog_service import CatalogService

router = APIRouter(prefix="/api/products", tags=["Products"], dependencies=[Depends(require_auth)])


@router.get(
    "",
    response_model=ProductPage,
    summary="Listar productos (paginado)",
    description="""
    Productos con `stock_total` (suma de stock de todas sus variantes)

    **Parámetros:**
    - q: busca en SKU o nombre
    - sort: sku | name | stock
    - dir: asc | desc
    """,
)
def list_products(
    page: int = Query(1),
    per_page: int = Query(50, description="Entre 1 y 200"),
    q: Optional[str] = Query(None, description="Texto a buscar en SKU o nombre"),
    sort: str = Query("name", pattern="^(sku|name|stock)$"),
    dir: str = Query("asc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
):
    return CatalogService.list_products(db, page=page, per_page=per_page, search=q, sort=sort, direction=dir)


@router.post(
    "",
    response_model=ProductOut,
    status_code=status.HTTP_201_CREATED,
    summary="Crear producto",
)
def create_product(body: ProductCreate, db: Session = Depends(get_db)):
    """
    **Ejemplo:**
    ```json
    {"sku": "LP-1001", "name": "Remera Básica", "category": "Remeras", "base_price": 4500}
    ```
    """
    return CatalogService.create_product(db, body.model_dump())


@router.patch(
    "/stock",
    response_model=StockPatchResponse,
    summary="Ajustar stock de una variante",
    description="""
    Fija el stock de una variante identificada por `variantId` o por
    `sku` + `colorCode` + `sizeCode`. Registra un movimiento AJUSTE_MANUAL
    y lo envía a las plataformas vinculadas.
    """,
)
def patch_stock(body: StockPatch, db: Session = Depends(get_db)):
    return CatalogService.patch_stock(
        db,
        stock=body.stock,
        variant_id=body.variant_id,
        sku=body.sku,
        color_code=body.color_code,
        size_code=body.size_code,
    )


@router.delete(
    "/all",
    response_model=DeleteAllResponse,
    summary="Eliminar TODO el catálogo",
    description="Borra movimientos, stock, variantes, colores por producto, productos, colores y talles.",
)
def delete_all_products(db: Session = Depends(get_db)):
    counts = CatalogService.delete_all(db)
    return {"message": "Catálogo eliminado", "deleted": counts}


@router.put(
    "/variants/{variant_id}/external-ids",
    response_model=ExternalIdsResponse,
    summary="Vincular variante con Tienda Nube / Mercado Libre",
)
def update_variant_external_ids(variant_id: str, body: VariantExternalIdsUpdate, db: Session = Depends(get_db)):
    return CatalogService.update_variant_external_ids(
        db, variant_id, body.tienda_nube_variant_id, body.mercado_libre_variant_id
    )


@router.get(
    "/{sku}",
    response_model=ProductDetail,
    summary="Detalle de producto por SKU",
)
def get_product(sku: str, db: Session = Depends(get_db)):
    return CatalogService.get_product_by_sku(db, sku)


@router.put(
    "/{product_id}",
    response_model=ProductOut,
    summary="Actualizar producto",
)
def update_product(product_id: str, body: ProductUpdate, db: Session = Depends(get_db)):
    return CatalogService.update_product(db, product_id, body.model_dump())


@router.put(
    "/{product_id}/external-ids",
    response_model=ExternalIdsResponse,
    summary="Vincular producto con Tienda Nube / Mercado Libre",
)
def update_product_external_ids(product_id: str, body: ProductExternalIdsUpdate, db: Session = Depends(get_db)):
    return CatalogService.update_product_external_ids(db, product_id, body.tienda_nube_id, body.mercado_libre_id)


@router.post(
    "/{product_id}/variants",
    response_model=VariantCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Agregar variante (color + talle)",
)
def add_variant(product_id: str, body: VariantCreate, db: Session = Depends(get_db)):
    return CatalogService.add_variant(
        db,
        product_id,
        size_code=body.size_code,
        color_code=body.color_code,
        color_name=body.color_name,
        sku=body.sku,
        stock=body.stock,
    )
