"""
SQLAlchemy Event Listeners

- Timestamps: `updated_at` se actualiza en cada flush de un objeto modificado
- Auditoría: stock_movements es append-only desde el ORM

Las limpiezas masivas (borrado total del catálogo, poda de variantes en la
importación de Tienda Nube) usan DELETE en bloque y no pasan por el flush.
"""

from sqlalchemy import event
from sqlalchemy.orm import Session
from datetime import datetime
import logging

from app.core.exceptions import StockMovementImmutableException

logger = logging.getLogger(__name__)

_configured = False


def setup_timestamp_listeners():
    """
    Configurar event listeners para timestamps automáticos

    Aplica a TODOS los modelos que tengan columna `updated_at`
    """

    @event.listens_for(Session, 'before_flush')
    def receive_before_flush(session, flush_context, instances):
        for obj in session.dirty:
            if hasattr(obj, 'updated_at') and session.is_modified(obj):
                obj.updated_at = datetime.now()

    logger.info("OK - Timestamp event listeners configurados")


def setup_audit_listeners():
    """
    Bloquear UPDATE/DELETE de StockMovement vía sesión
    """
    from app.models import StockMovement

    @event.listens_for(Session, 'before_flush')
    def guard_stock_movements(session, flush_context, instances):
        for obj in session.dirty:
            if isinstance(obj, StockMovement) and session.is_modified(obj):
                raise StockMovementImmutableException(obj.id)
        for obj in session.deleted:
            if isinstance(obj, StockMovement):
                raise StockMovementImmutableException(obj.id)

    logger.info("OK - Auditoría de stock_movements configurada")


def setup_all_events():
    """
    Configurar TODOS los event listeners de la aplicación

    Llamar desde app/main.py al iniciar la aplicación (idempotente)
    """
    global _configured
    if _configured:
        return
    setup_timestamp_listeners()
    setup_audit_listeners()
    _configured = True
