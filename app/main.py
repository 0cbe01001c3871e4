"""
LupoHub Backend - FastAPI Application

Principios:
- Minimalista: Solo lo esencial
- Modular: Cada router = un módulo
- Documentado: Swagger automático
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import time

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.database import Base, SessionLocal, engine
from app.core.exceptions import BaseAppException
from app.core.events import setup_all_events
from app.routers import auth, colors, customers, integrations, orders, products, sizes, stock, users

# Configuración
settings = get_settings()

# Logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# FastAPI App
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
    Backend mayorista de indumentaria:
    - Catálogo con matriz color × talle
    - Stock por variante con log de movimientos
    - Pedidos mayoristas con armado y estados
    - Sincronización con Tienda Nube y Mercado Libre

    Arquitectura: FastAPI + MySQL
    """,
    docs_url="/docs",  # Swagger UI
    redoc_url="/redoc",  # ReDoc
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Middleware: Request logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log todas las requests con timing"""
    start_time = time.time()

    logger.info(f"→ {request.method} {request.url.path}")

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"← {request.method} {request.url.path} - {response.status_code} ({duration:.3f}s)"
    )

    return response


# Exception Handlers
@app.exception_handler(BaseAppException)
async def app_exception_handler(request: Request, exc: BaseAppException):
    """Handler para excepciones de la aplicación"""
    if exc.status_code >= 500:
        logger.error(f"❌ {exc.__class__.__name__}: {exc.message} {exc.details}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.__class__.__name__, "message": exc.message, "details": exc.details},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Errores no previstos: 500 genérico, detalle solo en el log"""
    logger.exception(f"❌ Error no controlado en {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "InternalServerError", "message": "Error interno del servidor", "details": {}},
    )


# Routers
app.include_router(auth.router)
app.include_router(products.router)
app.include_router(colors.router)
app.include_router(sizes.router)
app.include_router(orders.router)
app.include_router(customers.router)
app.include_router(users.router)
app.include_router(stock.router)
app.include_router(integrations.oauth_router)
app.include_router(integrations.router)


# Health Check
@app.get("/", tags=["Health"])
def root():
    """
    Health check endpoint

    Verifica que el servidor está corriendo
    """
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
def health_check():
    """Health check con verificación de la base de datos"""
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError as e:
        logger.warning(f"⚠️ Health check: base de datos no disponible: {e}")
        database = "unavailable"
    finally:
        db.close()

    return {
        "status": "healthy" if database == "connected" else "degraded",
        "database": database,
        "version": settings.APP_VERSION,
    }


def create_tables():
    """Crear tablas faltantes (una por una, sin frenar si alguna falla)"""
    import app.models  # noqa: F401

    logger.info("📊 Verificando/creando tablas en la base de datos...")
    inspector = inspect(engine)

    tables_created = 0
    tables_failed = 0

    for table in Base.metadata.sorted_tables:
        try:
            if not inspector.has_table(table.name):
                table.create(bind=engine, checkfirst=False)
                tables_created += 1
                logger.info(f"  ✓ Tabla '{table.name}' creada")
            else:
                logger.info(f"  → Tabla '{table.name}' ya existe")
        except SQLAlchemyError as e:
            tables_failed += 1
            logger.warning(f"  ⚠️ Error al crear tabla '{table.name}': {str(e)[:100]}")
            continue

    logger.info(f"✅ Proceso completado: {tables_created} creadas, {tables_failed} con errores")


# Startup/Shutdown Events
@app.on_event("startup")
async def startup_event():
    """Se ejecuta al iniciar el servidor"""
    logger.info(f"🚀 {settings.APP_NAME} v{settings.APP_VERSION} iniciando...")
    logger.info(f"📚 Documentación: http://localhost:{settings.PORT}/docs")

    create_tables()

    # Timestamps y auditoría de movimientos de stock
    setup_all_events()


@app.on_event("shutdown")
async def shutdown_event():
    """Se ejecuta al detener el servidor"""
    logger.info(f"👋 {settings.APP_NAME} deteniendo...")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,  # Auto-reload en desarrollo
        log_level="info",
    )
