"""
Router: SIZES

Catálogo de talles (compatible con el esquema heredado `attributes`)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from app.core.database import get_db
from app.core.security import require_auth
from app.schemas.product import SizeOut
from app.services.catalog_service import CatalogService

router = APIRouter(prefix="/api/sizes", tags=["Sizes"], dependencies=[Depends(require_auth)])


@router.get("", response_model=List[SizeOut], summary="Listar talles")
def list_sizes(db: Session = Depends(get_db)):
    return CatalogService.list_sizes(db)
