"""
SyncTracker - Registro en memoria de los envíos de stock a marketplaces

Cada push (Tienda Nube o Mercado Libre) deja un resultado observable:
éxito, error o "sin destino". Se consulta en GET /api/stock/sync/log.
Es por proceso y acotado (los más viejos se descartan).
"""

from collections import deque
from datetime import datetime
from threading import Lock
from typing import Any, Deque, Dict, List, Optional

MAX_ENTRIES = 500

_entries: Deque[Dict[str, Any]] = deque(maxlen=MAX_ENTRIES)
_lock = Lock()


class SyncTracker:

    @staticmethod
    def record(
        platform: str,
        target: str,
        stock: int,
        success: bool,
        error: Optional[str] = None,
        variant_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        entry = {
            "platform": platform,
            "target": target,
            "variantId": variant_id,
            "stock": stock,
            "success": success,
            "error": error,
            "at": datetime.now().isoformat(timespec="seconds"),
        }
        with _lock:
            _entries.append(entry)
        return entry

    @staticmethod
    def recent(limit: int = 50, platform: Optional[str] = None) -> List[Dict[str, Any]]:
        """Últimos envíos, más nuevo primero"""
        with _lock:
            items = list(_entries)
        items.reverse()
        if platform:
            items = [e for e in items if e["platform"] == platform]
        return items[:limit]

    @staticmethod
    def clear() -> None:
        with _lock:
            _entries.clear()
