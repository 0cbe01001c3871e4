"""
Router: INTEGRATIONS

Tienda Nube y Mercado Libre

Endpoints:
- OAuth: /{platform}/auth (URL) y /{platform}/callback (redirect del marketplace)
- Estado y desconexión
- Importación de catálogo de Tienda Nube
- Envío masivo de stock y listado de órdenes externas

Los callbacks no llevan JWT: los invoca el navegador redirigido por el
marketplace.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.database import get_db
from app.core.security import require_auth
from app.schemas.integration import (
    AuthUrlResponse,
    DisconnectResponse,
    ImportResult,
    IntegrationStatus,
    StockPushResult,
)
from app.services.integration_service import IntegrationService

router = APIRouter(prefix="/api/integrations", tags=["Integrations"], dependencies=[Depends(require_auth)])

oauth_router = APIRouter(prefix="/api/integrations", tags=["Integrations"])


# ==================== OAUTH ====================

@oauth_router.get("/{platform}/callback", summary="Callback OAuth (redirige al frontend)")
def oauth_callback(
    platform: str,
    code: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    IntegrationService.validate_platform(platform)
    url = IntegrationService.handle_callback(db, platform, code)
    return RedirectResponse(url=url, status_code=302)


@router.get("/status", response_model=IntegrationStatus, summary="Plataformas conectadas")
def integration_status(db: Session = Depends(get_db)):
    return IntegrationService.status(db)


@router.get("/{platform}/auth", response_model=AuthUrlResponse, summary="URL de autorización OAuth")
def auth_url(platform: str):
    return {"url": IntegrationService.get_auth_url(platform)}


@router.delete("/{platform}/disconnect", response_model=DisconnectResponse, summary="Desconectar plataforma")
def disconnect(platform: str, db: Session = Depends(get_db)):
    return IntegrationService.disconnect(db, platform)


# ==================== TIENDA NUBE ====================

@router.post(
    "/tiendanube/sync",
    response_model=ImportResult,
    summary="Importar catálogo de Tienda Nube",
    description="""
    Importa productos, colores, talles, variantes y stock desde Tienda Nube.

    - Idempotente: re-ejecutar con los mismos datos no genera cambios
    - Elimina variantes locales que ya no existen en Tienda Nube
    - Envía el stock a Mercado Libre (por SKU) en segundo plano
    """,
)
def sync_tiendanube(background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    return IntegrationService.import_tiendanube_products(db, background_tasks)


@router.post("/tiendanube/sync-stock", response_model=StockPushResult, summary="Enviar stock local a Tienda Nube")
def push_stock_tiendanube(db: Session = Depends(get_db)):
    return IntegrationService.push_all_stock_to_tiendanube(db)


@router.get("/tiendanube/orders", response_model=List[dict], summary="Órdenes de Tienda Nube")
def tiendanube_orders(
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    return IntegrationService.list_tiendanube_orders(db, page=page, per_page=per_page)


# ==================== MERCADO LIBRE ====================

@router.post("/mercadolibre/sync-stock", response_model=StockPushResult, summary="Enviar stock local a Mercado Libre")
def push_stock_mercadolibre(db: Session = Depends(get_db)):
    return IntegrationService.push_all_stock_to_mercadolibre(db)


@router.get("/mercadolibre/orders", response_model=List[dict], summary="Órdenes de Mercado Libre")
def mercadolibre_orders(
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=50),
    db: Session = Depends(get_db),
):
    return IntegrationService.list_mercadolibre_orders(db, offset=offset, limit=limit)
