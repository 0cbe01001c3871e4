"""
Router: COLORS

Catálogo de colores (compatible con el esquema heredado `attributes`)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from app.core.database import get_db
from app.core.security import require_auth
from app.schemas.product import ColorOut
from app.services.catalog_service import CatalogService

router = APIRouter(prefix="/api/colors", tags=["Colors"], dependencies=[Depends(require_auth)])


@router.get(
    "",
    response_model=List[ColorOut],
    summary="Listar colores",
    description="Colores ordenados por nombre. Se excluyen nombres que son talles (S, M, XL, 38...).",
)
def list_colors(db: Session = Depends(get_db)):
    return CatalogService.list_colors(db)
