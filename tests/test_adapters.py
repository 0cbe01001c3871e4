import httpx
import pytest

from app.adapters.http import MarketplaceHTTPError, parse_response
from app.adapters.mercadolibre_adapter import MercadoLibreAdapter
from app.adapters.tiendanube_adapter import TiendaNubeAdapter, TiendaNubeClient

TN_PRODUCTS = "https://api.tiendanube.com/v1/123/products"


# ==================== TIENDA NUBE ====================

@pytest.mark.parametrize("value, expected", [
    ({"es": "Negro", "pt": "Preto"}, "Negro"),
    ({"pt": "Preto"}, "Preto"),
    ({"en": "Black"}, "Black"),
    (" Rojo ", "Rojo"),
    (None, ""),
])
def test_localized(value, expected):
    assert TiendaNubeAdapter.localized(value) == expected


@pytest.mark.parametrize("values, expected", [
    ([], ("Único", "U")),
    ([{"es": "Negro"}], ("Negro", "U")),
    ([{"es": "Negro"}, {"es": "M"}], ("Negro", "M")),
    ([{"es": "Azul"}, {"es": "Marino"}, {"es": "XL"}], ("Azul Marino", "XL")),
])
def test_extract_color_and_size(values, expected):
    assert TiendaNubeAdapter.extract_color_and_size({"values": values}) == expected


def test_variant_stock_null_is_zero():
    assert TiendaNubeAdapter.variant_stock({"stock": None}) == 0
    assert TiendaNubeAdapter.variant_stock({"stock": -3}) == 0
    assert TiendaNubeAdapter.variant_stock({"stock": "12"}) == 12


def test_default_sku_and_name():
    product = {"id": 9, "name": {"pt": "Moletom"}, "variants": [{"sku": None}]}

    assert TiendaNubeAdapter.default_sku(product) == "TN-9"
    assert TiendaNubeAdapter.product_name(product) == "Moletom"
    assert TiendaNubeAdapter.product_name({"id": 9}) == "Producto 9"


def test_list_products_not_found_is_end_of_listing(marketplace):
    marketplace.add("GET", TN_PRODUCTS, (404, {"code": 404, "message": "Last page is 3"}))

    with TiendaNubeClient("tn-token", "123") as client:
        assert client.list_products(4) is None


def test_list_products_sends_headers(marketplace):
    marketplace.add("GET", TN_PRODUCTS, (200, [{"id": 1}]))

    with TiendaNubeClient("tn-token", "123") as client:
        assert client.list_products(1) == [{"id": 1}]

    request = marketplace.calls("GET", TN_PRODUCTS)[0]
    assert request.headers["Authentication"] == "bearer tn-token"
    assert request.headers["User-Agent"]


def test_tiendanube_authorization_url():
    url = TiendaNubeClient.authorization_url("4321", "http://localhost/cb")

    assert url.startswith("https://www.tiendanube.com/apps/4321/authorize?")
    assert "response_type=code" in url


# ==================== MERCADO LIBRE ====================

def test_find_variation_by_sku():
    item = {"variations": [
        {"id": 1, "seller_custom_field": "LP-1"},
        {"id": 2, "seller_custom_field": "LP-2"},
    ]}

    assert MercadoLibreAdapter.find_variation_by_sku(item, "LP-2")["id"] == 2
    assert MercadoLibreAdapter.find_variation_by_sku(item, "LP-3") is None
    assert MercadoLibreAdapter.has_variations(item)
    assert not MercadoLibreAdapter.has_variations({"variations": []})


# ==================== HTTP ====================

def test_parse_response_uses_upstream_message():
    response = httpx.Response(400, json={"message": "invalid_grant", "error": "invalid_grant"})

    with pytest.raises(MarketplaceHTTPError) as exc:
        parse_response("mercadolibre", response)

    assert exc.value.status_code == 400
    assert exc.value.message == "invalid_grant"


def test_parse_response_empty_body():
    assert parse_response("tiendanube", httpx.Response(204)) is None


def test_network_error_is_marketplace_error(marketplace):
    def boom(request):
        raise httpx.ConnectError("sin red", request=request)

    marketplace.add("GET", TN_PRODUCTS, boom)

    with TiendaNubeClient("tn-token", "123") as client:
        with pytest.raises(MarketplaceHTTPError) as exc:
            client.list_products(1)

    assert exc.value.status_code is None


def test_parse_response_rejects_non_json_body():
    response = httpx.Response(200, text="<html>Mantenimiento</html>")

    with pytest.raises(MarketplaceHTTPError) as exc:
        parse_response("tiendanube", response)

    assert exc.value.status_code == 200
    assert "Mantenimiento" in exc.value.message


def test_list_products_rejects_unexpected_payload(marketplace):
    marketplace.add("GET", TN_PRODUCTS, (200, {"products": []}))

    with TiendaNubeClient("tn-token", "123") as client:
        with pytest.raises(MarketplaceHTTPError):
            client.list_products(1)
