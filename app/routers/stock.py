"""
Router: STOCK

Log de movimientos y sincronización de stock con marketplaces
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from app.core.database import get_db
from app.core.security import require_auth
from app.schemas.stock import MovementTypeEnum, StockMovementOut, StockSyncResponse, SyncLogEntry
from app.services.stock_service import StockService
from app.services.sync_tracker import SyncTracker

router = APIRouter(prefix="/api/stock", tags=["Stock"], dependencies=[Depends(require_auth)])


@router.get(
    "/movements",
    response_model=List[StockMovementOut],
    summary="Movimientos de stock",
    description="""
    Historial de cambios de stock, más nuevos primero

    **Filtros:** variantId, type, from, to (YYYY-MM-DD), limit (default 50)
    """,
)
def list_movements(
    variant_id: Optional[str] = Query(None, alias="variantId"),
    movement_type: Optional[MovementTypeEnum] = Query(None, alias="type"),
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    limit: int = Query(50, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    return StockService.get_movements(
        db,
        variant_id=variant_id,
        movement_type=movement_type.value if movement_type else None,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
    )


@router.get(
    "/sync/log",
    response_model=List[SyncLogEntry],
    summary="Últimos envíos de stock a marketplaces",
)
def sync_log(
    limit: int = Query(50, ge=1, le=500),
    platform: Optional[str] = Query(None, pattern="^(tiendanube|mercadolibre)$"),
):
    return SyncTracker.recent(limit=limit, platform=platform)


@router.post(
    "/sync/{variant_id}",
    response_model=StockSyncResponse,
    summary="Reenviar stock de una variante a los marketplaces",
)
def sync_variant(variant_id: str, db: Session = Depends(get_db)):
    return StockService.sync_variant(db, variant_id)
