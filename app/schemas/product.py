"""
Schemas para Products, variantes, colores y talles

Principio: Input validation + Output serialization
sku/name son opcionales en el alta: CatalogService responde 400
"SKU y Nombre son requeridos" si faltan.
"""

from pydantic import BaseModel, Field
from typing import Optional, List


# ==================== REQUEST SCHEMAS ====================

class ProductCreate(BaseModel):
    sku: Optional[str] = None
    name: Optional[str] = None
    category: Optional[str] = None
    base_price: Optional[float] = Field(None, ge=0, alias="basePrice")
    description: Optional[str] = None

    class Config:
        populate_by_name = True


class ProductUpdate(BaseModel):
    """Actualización parcial: los campos omitidos se conservan"""
    name: Optional[str] = None
    category: Optional[str] = None
    base_price: Optional[float] = Field(None, ge=0, alias="basePrice")
    description: Optional[str] = None

    class Config:
        populate_by_name = True


class ProductExternalIdsUpdate(BaseModel):
    tienda_nube_id: Optional[str] = Field(None, alias="tiendaNubeId")
    mercado_libre_id: Optional[str] = Field(None, alias="mercadoLibreId")

    class Config:
        populate_by_name = True


class VariantExternalIdsUpdate(BaseModel):
    tienda_nube_variant_id: Optional[str] = Field(None, alias="tiendaNubeVariantId")
    mercado_libre_variant_id: Optional[str] = Field(None, alias="mercadoLibreVariantId")

    class Config:
        populate_by_name = True


class VariantCreate(BaseModel):
    """Alta manual de variante: color por código o nombre + talle"""
    color_code: Optional[str] = Field(None, alias="colorCode")
    color_name: Optional[str] = Field(None, alias="colorName")
    size_code: str = Field(..., min_length=1, max_length=100, alias="sizeCode")
    sku: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)

    class Config:
        populate_by_name = True


class StockPatch(BaseModel):
    """
    Fijar stock de una variante

    Se identifica por variantId o por sku + colorCode + sizeCode.
    """
    variant_id: Optional[str] = Field(None, alias="variantId")
    sku: Optional[str] = None
    color_code: Optional[str] = Field(None, alias="colorCode")
    size_code: Optional[str] = Field(None, alias="sizeCode")
    stock: Optional[int] = None

    class Config:
        populate_by_name = True


# ==================== RESPONSE SCHEMAS ====================

class ExternalIds(BaseModel):
    tienda_nube: Optional[str] = Field(None, alias="tiendaNube")
    mercado_libre: Optional[str] = Field(None, alias="mercadoLibre")

    class Config:
        populate_by_name = True


class ProductOut(BaseModel):
    id: str
    sku: str
    name: str
    category: Optional[str] = None
    base_price: float = 0
    description: Optional[str] = None
    stock_total: int = 0
    external_ids: ExternalIds = Field(..., alias="externalIds")

    class Config:
        populate_by_name = True


class VariantOut(BaseModel):
    variant_id: str
    sku: Optional[str] = None
    color_code: str
    color_name: str
    size_code: str
    stock: int
    tienda_nube_variant_id: Optional[str] = None
    mercado_libre_variant_id: Optional[str] = None
    external_ids: ExternalIds = Field(..., alias="externalIds")

    class Config:
        populate_by_name = True


class ProductDetail(ProductOut):
    variants: List[VariantOut]


class ProductPage(BaseModel):
    items: List[ProductOut]
    page: int
    per_page: int
    total: int


class ExternalIdsResponse(BaseModel):
    id: str
    external_ids: ExternalIds = Field(..., alias="externalIds")

    class Config:
        populate_by_name = True


class VariantCreateResponse(BaseModel):
    variant_id: str = Field(..., alias="variantId")
    product_id: str = Field(..., alias="productId")
    stock: int

    class Config:
        populate_by_name = True


class StockPatchResponse(BaseModel):
    variant_id: str = Field(..., alias="variantId")
    stock: int

    class Config:
        populate_by_name = True


class DeleteAllResponse(BaseModel):
    message: str
    deleted: dict


class ColorOut(BaseModel):
    id: str
    code: str
    name: str
    hex: Optional[str] = None


class SizeOut(BaseModel):
    id: str
    code: str
    name: Optional[str] = None
