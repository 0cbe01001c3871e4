"""
Database connection usando SQLAlchemy 2.0
Patrón: Dependency Injection para sessions

Además del ORM expone tres primitivas SQL crudas (query, execute, get)
para los endpoints que dependen de introspección del esquema
(colors/sizes con tablas legacy).
"""

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import sessionmaker, Session, DeclarativeBase
from sqlalchemy.pool import StaticPool
from typing import Any, Dict, Generator, List, Optional, Union
from app.core.config import get_settings

settings = get_settings()


def _build_engine(url: Union[str, URL]):
    url = make_url(url)
    if url.get_backend_name() == "sqlite":
        # SQLite en memoria (tests): una sola conexión compartida
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=settings.DEBUG,
        )

    # Engine: Pool de conexiones a MySQL
    return create_engine(
        url,
        pool_pre_ping=True,  # Verifica conexión antes de usar
        pool_size=10,  # Max 10 conexiones simultáneas
        max_overflow=0,
        pool_recycle=3600,
        echo=settings.DEBUG,  # Log SQL queries si DEBUG=True
    )


engine = _build_engine(settings.database_url)

# SessionLocal: Factory para crear sessions
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# Base para todos los models
class Base(DeclarativeBase):
    """
    Base class para todos los models SQLAlchemy

    Uso:
        class Product(Base):
            __tablename__ = "products"
            ...
    """
    pass


def get_db() -> Generator[Session, None, None]:
    """
    Dependency para FastAPI

    Uso:
        @router.get("/orders")
        def get_orders(db: Session = Depends(get_db)):
            ...

    Cierra automáticamente la sesión al terminar
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ==================== SQL CRUDO ====================

def query(db: Session, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    """SELECT → lista de dicts"""
    result = db.execute(text(sql), params or {})
    return [dict(row) for row in result.mappings().all()]


def get(db: Session, sql: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    """SELECT → primera fila o None"""
    row = db.execute(text(sql), params or {}).mappings().first()
    return dict(row) if row else None


def execute(db: Session, sql: str, params: Optional[Dict[str, Any]] = None) -> int:
    """INSERT/UPDATE/DELETE → filas afectadas"""
    result = db.execute(text(sql), params or {})
    return result.rowcount


# ==================== INTROSPECCIÓN ====================

def has_table(db: Session, table_name: str) -> bool:
    return inspect(db.connection()).has_table(table_name)


def column_names(db: Session, table_name: str) -> List[str]:
    inspector = inspect(db.connection())
    if not inspector.has_table(table_name):
        return []
    return [col["name"] for col in inspector.get_columns(table_name)]


def has_column(db: Session, table_name: str, column_name: str) -> bool:
    return column_name in column_names(db, table_name)
