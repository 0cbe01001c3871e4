from urllib.parse import parse_qs

import httpx

from app.core.config import get_settings
from app.services.credential_store import CredentialStore

ML_TOKEN = "https://api.mercadolibre.com/oauth/token"
TN_TOKEN = "https://www.tiendanube.com/apps/authorize/token"
ML_SEARCH = "https://api.mercadolibre.com/users/999/items/search"


# ==================== OAUTH ====================

def test_status_reports_connections(client, auth_headers, tn_connected):
    response = client.get("/api/integrations/status", headers=auth_headers)

    assert response.json() == {"mercadolibre": False, "tiendanube": True}


def test_auth_url_mercadolibre(client, auth_headers):
    url = client.get("/api/integrations/mercadolibre/auth", headers=auth_headers).json()["url"]

    assert url.startswith("https://auth.mercadolibre.com.ar/authorization?")
    query = parse_qs(url.split("?", 1)[1])
    assert query["client_id"] == ["ml-app"]
    assert query["response_type"] == ["code"]
    assert query["redirect_uri"] == ["http://localhost:3001/api/integrations/mercadolibre/callback"]


def test_auth_url_tiendanube(client, auth_headers):
    url = client.get("/api/integrations/tiendanube/auth", headers=auth_headers).json()["url"]

    assert url.startswith("https://www.tiendanube.com/apps/tn-app/authorize?")


def test_auth_url_not_configured(client, auth_headers, monkeypatch):
    monkeypatch.setattr(get_settings(), "MERCADO_LIBRE_APP_ID", None)

    response = client.get("/api/integrations/mercadolibre/auth", headers=auth_headers)

    assert response.status_code == 500
    assert response.json()["message"] == "Mercado Libre App ID not configured"


def test_invalid_platform(client, auth_headers):
    response = client.get("/api/integrations/amazon/auth", headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Plataforma inválida"


def test_mercadolibre_callback_stores_credentials(client, db, marketplace):
    marketplace.add("POST", ML_TOKEN, (200, {
        "access_token": "APP_USR-nuevo", "refresh_token": "TG-refresh", "expires_in": 21600, "user_id": 12345,
    }))

    response = client.get(
        "/api/integrations/mercadolibre/callback?code=TG-abc", follow_redirects=False
    )

    assert response.status_code == 302
    assert response.headers["location"] == "http://localhost:3000/#settings?status=success&platform=mercadolibre"
    form = parse_qs(marketplace.calls("POST", ML_TOKEN)[0].content.decode())
    assert form["grant_type"] == ["authorization_code"]
    assert form["code"] == ["TG-abc"]
    assert form["client_secret"] == ["ml-secret"]
    credentials = CredentialStore.snapshot(db, "mercadolibre")
    assert credentials["access_token"] == "APP_USR-nuevo"
    assert credentials["refresh_token"] == "TG-refresh"
    assert credentials["user_id"] == "12345"
    assert credentials["expires_at"] is not None


def test_tiendanube_callback_stores_store_id(client, db, marketplace):
    marketplace.add("POST", TN_TOKEN, (200, {"access_token": "tn-nuevo", "token_type": "bearer", "user_id": 4567}))

    response = client.get("/api/integrations/tiendanube/callback?code=xyz", follow_redirects=False)

    assert response.status_code == 302
    assert "status=success" in response.headers["location"]
    assert marketplace.bodies("POST", TN_TOKEN)[0]["code"] == "xyz"
    credentials = CredentialStore.snapshot(db, "tiendanube")
    assert credentials["access_token"] == "tn-nuevo"
    assert credentials["store_id"] == "4567"


def test_callback_exchange_failure_redirects_with_error(client, db, marketplace):
    marketplace.add("POST", ML_TOKEN, (400, {"message": "invalid_grant"}))

    response = client.get("/api/integrations/mercadolibre/callback?code=vencido", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "http://localhost:3000/#settings?status=error&platform=mercadolibre"
    assert CredentialStore.snapshot(db, "mercadolibre") is None


def test_callback_without_code(client):
    response = client.get("/api/integrations/tiendanube/callback", follow_redirects=False)

    assert response.status_code == 400
    assert response.json()["message"] == "Missing code or configuration"


def test_reconnect_replaces_credentials(db, tn_connected):
    CredentialStore.save(db, "tiendanube", access_token="otro", user_id="123", store_id="123")

    assert CredentialStore.snapshot(db, "tiendanube")["access_token"] == "otro"
    assert CredentialStore.status(db) == {"mercadolibre": False, "tiendanube": True}


def test_disconnect(client, auth_headers, tn_connected):
    response = client.delete("/api/integrations/tiendanube/disconnect", headers=auth_headers)

    assert response.json() == {"message": "Desconectado", "platform": "tiendanube"}
    assert client.get("/api/integrations/status", headers=auth_headers).json()["tiendanube"] is False


# ==================== ENVÍO MASIVO ====================

def test_push_all_stock_to_tiendanube(client, auth_headers, seed_variant, marketplace, tn_connected):
    seed_variant(size_code="M", stock=5, tienda_nube_id="555", tienda_nube_variant_id="777")
    seed_variant(size_code="L", stock=2, tienda_nube_variant_id="778")
    seed_variant(sku="LP-2002", stock=9)
    marketplace.add("PUT", "https://api.tiendanube.com/v1/123/products/555/variants/777", (200, {}))

    body = client.post("/api/integrations/tiendanube/sync-stock", headers=auth_headers).json()

    assert (body["updated"], body["errors"]) == (1, 1)
    assert marketplace.bodies("PUT", "https://api.tiendanube.com/v1/123/products/555/variants/777") == [{"stock": 5}]
    assert len(body["logs"]) == 1


def test_push_all_stock_requires_connection(client, auth_headers):
    response = client.post("/api/integrations/mercadolibre/sync-stock", headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "No estás conectado a Mercado Libre"


def test_push_all_stock_to_mercadolibre(client, auth_headers, seed_variant, marketplace, ml_connected):
    seed_variant(sku="LP-1001", stock=5, mercado_libre_id="MLA9", mercado_libre_variant_id="91")
    seed_variant(sku="LP-2002", stock=3, variant_sku="LP-2002-NEG-M")
    seed_variant(sku="LP-3003", stock=1)
    marketplace.add("PUT", "https://api.mercadolibre.com/items/MLA9/variations/91", (200, {}))
    marketplace.add("GET", ML_SEARCH, (200, {"results": ["MLA7"]}))
    marketplace.add("GET", "https://api.mercadolibre.com/items/MLA7", (200, {"id": "MLA7", "variations": []}))
    marketplace.add("PUT", "https://api.mercadolibre.com/items/MLA7", (200, {}))

    body = client.post("/api/integrations/mercadolibre/sync-stock", headers=auth_headers).json()

    assert (body["updated"], body["errors"]) == (2, 0)
    assert marketplace.bodies("PUT", "https://api.mercadolibre.com/items/MLA9/variations/91") == [
        {"available_quantity": 5}
    ]
    assert marketplace.bodies("PUT", "https://api.mercadolibre.com/items/MLA7") == [{"available_quantity": 3}]
    assert marketplace.calls("GET", ML_SEARCH)[0].url.params["seller_sku"] == "LP-2002-NEG-M"


def test_push_all_sizes_of_one_listing_go_to_their_variations(
    client, auth_headers, seed_variant, marketplace, ml_connected
):
    seed_variant(size_code="M", stock=10, mercado_libre_id="MLA1", variant_sku="LP-1001-NEG-M")
    seed_variant(size_code="L", stock=5, mercado_libre_id="MLA1", variant_sku="LP-1001-NEG-L")
    marketplace.add("GET", ML_SEARCH, (200, {"results": ["MLA1"]}))
    marketplace.add("GET", "https://api.mercadolibre.com/items/MLA1", (200, {"id": "MLA1", "variations": [
        {"id": 11, "seller_custom_field": "LP-1001-NEG-M"},
        {"id": 12, "seller_custom_field": "LP-1001-NEG-L"},
    ]}))
    marketplace.add("PUT", "https://api.mercadolibre.com/items/MLA1/variations/11", (200, {}))
    marketplace.add("PUT", "https://api.mercadolibre.com/items/MLA1/variations/12", (200, {}))

    body = client.post("/api/integrations/mercadolibre/sync-stock", headers=auth_headers).json()

    assert (body["updated"], body["errors"]) == (2, 0)
    assert marketplace.calls("PUT", "https://api.mercadolibre.com/items/MLA1") == []
    assert marketplace.bodies("PUT", "https://api.mercadolibre.com/items/MLA1/variations/11") == [
        {"available_quantity": 10}
    ]
    assert marketplace.bodies("PUT", "https://api.mercadolibre.com/items/MLA1/variations/12") == [
        {"available_quantity": 5}
    ]


# ==================== ÓRDENES EXTERNAS ====================

def test_tiendanube_orders(client, auth_headers, marketplace, tn_connected):
    marketplace.add("GET", "https://api.tiendanube.com/v1/123/orders", (200, [{"id": 1, "total": "100.00"}]))

    response = client.get("/api/integrations/tiendanube/orders", headers=auth_headers)

    assert response.json() == [{"id": 1, "total": "100.00"}]


def test_mercadolibre_orders(client, auth_headers, marketplace, ml_connected):
    def orders(request):
        assert request.url.params["seller"] == "999"
        return httpx.Response(200, json={"results": [{"id": 2000001}], "paging": {"total": 1}})

    marketplace.add("GET", "https://api.mercadolibre.com/orders/search", orders)

    response = client.get("/api/integrations/mercadolibre/orders", headers=auth_headers)

    assert response.json() == [{"id": 2000001}]


def test_external_orders_upstream_error(client, auth_headers, marketplace, tn_connected):
    marketplace.add("GET", "https://api.tiendanube.com/v1/123/orders", (401, {"message": "Invalid access token"}))

    response = client.get("/api/integrations/tiendanube/orders", headers=auth_headers)

    assert response.status_code == 502
