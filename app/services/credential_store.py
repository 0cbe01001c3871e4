"""
CredentialStore - Credenciales OAuth por (tenant, plataforma)

Reemplaza el estado global: cada lectura recibe la sesión y el tenant.
Los snapshots (dict) se usan en tareas en segundo plano que no tienen sesión.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional
import logging

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models import Integration
from app.services.id_generator import IDGenerator

logger = logging.getLogger(__name__)


class CredentialStore:

    @staticmethod
    def _tenant(tenant: Optional[str]) -> str:
        return tenant or get_settings().DEFAULT_TENANT

    @staticmethod
    def get(db: Session, platform: str, tenant: Optional[str] = None) -> Optional[Integration]:
        return db.query(Integration).filter(
            Integration.tenant == CredentialStore._tenant(tenant),
            Integration.platform == platform,
        ).first()

    @staticmethod
    def snapshot(db: Session, platform: str, tenant: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Copia desacoplada de la sesión, o None si la plataforma no está conectada"""
        row = CredentialStore.get(db, platform, tenant)
        if not row or not row.access_token:
            return None
        return {
            "platform": row.platform,
            "access_token": row.access_token,
            "refresh_token": row.refresh_token,
            "user_id": row.user_id,
            "store_id": row.store_id or row.user_id,
            "expires_at": row.expires_at,
        }

    @staticmethod
    def save(
        db: Session,
        platform: str,
        access_token: str,
        refresh_token: Optional[str] = None,
        expires_in: Optional[int] = None,
        user_id: Optional[str] = None,
        store_id: Optional[str] = None,
        tenant: Optional[str] = None,
    ) -> Integration:
        """Upsert de credenciales (una fila por tenant+plataforma)"""
        expires_at = datetime.now() + timedelta(seconds=int(expires_in)) if expires_in else None
        row = CredentialStore.get(db, platform, tenant)
        if row is None:
            row = Integration(
                id=IDGenerator.generate_integration_id(),
                tenant=CredentialStore._tenant(tenant),
                platform=platform,
                access_token=access_token,
            )
            db.add(row)
        row.access_token = access_token
        row.refresh_token = refresh_token
        row.expires_at = expires_at
        row.user_id = user_id
        row.store_id = store_id
        db.commit()
        logger.info(f"🔑 Credenciales guardadas: {platform} (tenant={row.tenant})")
        return row

    @staticmethod
    def delete(db: Session, platform: str, tenant: Optional[str] = None) -> bool:
        deleted = db.query(Integration).filter(
            Integration.tenant == CredentialStore._tenant(tenant),
            Integration.platform == platform,
        ).delete(synchronize_session=False)
        db.commit()
        logger.info(f"🔌 Desconectado: {platform} ({deleted} filas)")
        return deleted > 0

    @staticmethod
    def status(db: Session, tenant: Optional[str] = None) -> Dict[str, bool]:
        return {
            "mercadolibre": CredentialStore.snapshot(db, "mercadolibre", tenant) is not None,
            "tiendanube": CredentialStore.snapshot(db, "tiendanube", tenant) is not None,
        }
