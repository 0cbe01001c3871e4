"""
Fixtures y configuración compartida de Pytest

- SQLite en memoria (StaticPool) recreada en cada test
- Marketplaces simulados con httpx.MockTransport
- Usuario ADMIN y headers con JWT
"""
import json
import os

# -------- Entorno base de tests (antes de importar la app) --------
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["MERCADO_LIBRE_APP_ID"] = "ml-app"
os.environ["MERCADO_LIBRE_CLIENT_SECRET"] = "ml-secret"
os.environ["MERCADO_LIBRE_REDIRECT_URI"] = "http://localhost:3001/api/integrations/mercadolibre/callback"
os.environ["TIENDA_NUBE_APP_ID"] = "tn-app"
os.environ["TIENDA_NUBE_CLIENT_SECRET"] = "tn-secret"
os.environ["TIENDA_NUBE_REDIRECT_URI"] = "http://localhost:3001/api/integrations/tiendanube/callback"
os.environ["FRONTEND_URL"] = "http://localhost:3000"

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.adapters import http as marketplace_http  # noqa: E402
from app.core.database import Base, SessionLocal, engine  # noqa: E402
from app.core.events import setup_all_events  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402
from app.models import Color, Product, ProductColor, ProductVariant, Size, Stock  # noqa: E402
from app.services.auth_service import AuthService  # noqa: E402
from app.services.credential_store import CredentialStore  # noqa: E402
from app.services.id_generator import IDGenerator  # noqa: E402
from app.services.sync_tracker import SyncTracker  # noqa: E402

setup_all_events()


@pytest.fixture(autouse=True)
def database():
    """DB limpia por test"""
    Base.metadata.create_all(bind=engine)
    SyncTracker.clear()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    return TestClient(fastapi_app)


@pytest.fixture
def admin_user(db):
    return AuthService.create_user(db, name="Admin", email="admin@lupo.com", password="secreto", role="ADMIN")


@pytest.fixture
def auth_headers(admin_user):
    token = create_access_token({"id": admin_user.id, "email": admin_user.email, "role": admin_user.role})
    return {"Authorization": f"Bearer {token}"}


# -------- Catálogo --------

@pytest.fixture
def seed_variant(db):
    """
    Crea (o reutiliza) producto, color, talle y variante

    Devuelve el id de la variante.
    """

    def _seed(
        sku="LP-1001",
        color_code="NEG",
        color_name="Negro",
        size_code="M",
        stock=None,
        product_name="Remera Básica",
        tienda_nube_id=None,
        tienda_nube_variant_id=None,
        mercado_libre_id=None,
        mercado_libre_variant_id=None,
        variant_sku=None,
    ):
        product = db.query(Product).filter(Product.sku == sku).first()
        if product is None:
            product = Product(
                id=IDGenerator.generate_product_id(), sku=sku, name=product_name,
                category="Remeras", base_price=4500,
            )
            db.add(product)
        if tienda_nube_id:
            product.tienda_nube_id = tienda_nube_id
        if mercado_libre_id:
            product.mercado_libre_id = mercado_libre_id

        color = db.query(Color).filter(Color.code == color_code).first()
        if color is None:
            color = Color(id=IDGenerator.generate_color_id(), code=color_code, name=color_name, hex="#000000")
            db.add(color)

        size = db.query(Size).filter(Size.size_code == size_code).first()
        if size is None:
            size = Size(id=IDGenerator.generate_size_id(), size_code=size_code, name=size_code)
            db.add(size)
        db.flush()

        product_color = db.query(ProductColor).filter(
            ProductColor.product_id == product.id, ProductColor.color_id == color.id
        ).first()
        if product_color is None:
            product_color = ProductColor(
                id=IDGenerator.generate_product_color_id(), product_id=product.id, color_id=color.id
            )
            db.add(product_color)
            db.flush()

        variant = ProductVariant(
            id=IDGenerator.generate_variant_id(),
            product_color_id=product_color.id,
            size_id=size.id,
            sku=variant_sku,
            tienda_nube_variant_id=tienda_nube_variant_id,
            mercado_libre_variant_id=mercado_libre_variant_id,
        )
        db.add(variant)
        db.flush()
        if stock is not None:
            db.add(Stock(variant_id=variant.id, stock=stock))
        variant_id = variant.id
        db.commit()
        return variant_id

    return _seed


@pytest.fixture
def stock_of(db):
    """Stock actual leído directo de la DB"""

    def _stock_of(variant_id):
        return db.query(Stock.stock).filter(Stock.variant_id == variant_id).scalar()

    return _stock_of


# -------- Marketplaces simulados --------

class FakeMarketplace:
    """
    Servidor HTTP falso para Tienda Nube / Mercado Libre

    Las rutas se registran por (método, URL sin query). El responder puede
    ser (status, json) o un callable(request) → httpx.Response.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, url, responder=(200, {})):
        self.routes[(method, url)] = responder

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, f"{request.url.scheme}://{request.url.host}{request.url.path}")
        responder = self.routes.get(key)
        if responder is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if callable(responder):
            return responder(request)
        status, payload = responder
        return httpx.Response(status, json=payload)

    def calls(self, method, url):
        return [
            r for r in self.requests
            if r.method == method and f"{r.url.scheme}://{r.url.host}{r.url.path}" == url
        ]

    def bodies(self, method, url):
        return [json.loads(r.content) for r in self.calls(method, url)]


@pytest.fixture
def marketplace():
    fake = FakeMarketplace()
    marketplace_http.set_transport(httpx.MockTransport(fake.handler))
    yield fake
    marketplace_http.set_transport(None)


@pytest.fixture
def tn_connected(db):
    CredentialStore.save(db, "tiendanube", access_token="tn-token", expires_in=31536000, user_id="123", store_id="123")


@pytest.fixture
def ml_connected(db):
    CredentialStore.save(db, "mercadolibre", access_token="ml-token", refresh_token="ml-refresh", expires_in=21600, user_id="999")
