from app.models import StockMovement


def test_create_product(client, auth_headers):
    response = client.post(
        "/api/products",
        json={"sku": "LP-1001", "name": "Remera Básica", "category": "Remeras", "base_price": 4500},
        headers=auth_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["sku"] == "LP-1001"
    assert body["stock_total"] == 0
    assert body["externalIds"] == {"tiendaNube": None, "mercadoLibre": None}


def test_create_product_requires_sku_and_name(client, auth_headers):
    response = client.post("/api/products", json={"name": "Sin SKU"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "SKU y Nombre son requeridos"


def test_create_product_duplicate_sku(client, auth_headers, seed_variant):
    seed_variant(sku="LP-1001")

    response = client.post("/api/products", json={"sku": "LP-1001", "name": "Otra"}, headers=auth_headers)

    assert response.status_code == 409
    assert response.json()["message"] == "El SKU ya existe"


def test_list_products_paginates_with_stock_total(client, auth_headers, seed_variant):
    seed_variant(sku="LP-1001", size_code="S", stock=2, product_name="Remera")
    seed_variant(sku="LP-1001", size_code="M", stock=5, product_name="Remera")
    seed_variant(sku="LP-2002", size_code="M", stock=1, product_name="Buzo")
    seed_variant(sku="LP-3003", size_code="M", product_name="Campera")

    response = client.get("/api/products?page=1&per_page=2&sort=stock&dir=desc", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    assert body["page"] == 1
    assert body["per_page"] == 2
    assert [p["sku"] for p in body["items"]] == ["LP-1001", "LP-2002"]
    assert body["items"][0]["stock_total"] == 7

    second = client.get("/api/products?page=2&per_page=2&sort=stock&dir=desc", headers=auth_headers).json()
    assert [p["sku"] for p in second["items"]] == ["LP-3003"]
    assert second["items"][0]["stock_total"] == 0


def test_list_products_search(client, auth_headers, seed_variant):
    seed_variant(sku="LP-1001", product_name="Remera")
    seed_variant(sku="LP-2002", product_name="Buzo")

    body = client.get("/api/products?q=buz", headers=auth_headers).json()

    assert body["total"] == 1
    assert body["items"][0]["sku"] == "LP-2002"


def test_get_product_by_sku_orders_variants(client, auth_headers, seed_variant):
    seed_variant(color_code="ROJ", color_name="Rojo", size_code="S", stock=1)
    seed_variant(color_code="NEG", color_name="Negro", size_code="M", stock=10)
    seed_variant(color_code="NEG", color_name="Negro", size_code="L", stock=4)

    response = client.get("/api/products/LP-1001", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["stock_total"] == 15
    assert [(v["color_code"], v["size_code"]) for v in body["variants"]] == [
        ("NEG", "L"), ("NEG", "M"), ("ROJ", "S"),
    ]
    assert body["variants"][1]["stock"] == 10


def test_get_product_not_found(client, auth_headers):
    response = client.get("/api/products/NO-EXISTE", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Producto no encontrado"


def test_patch_stock_by_sku_color_size(client, auth_headers, db, seed_variant, stock_of):
    variant_id = seed_variant(stock=10)

    response = client.patch(
        "/api/products/stock",
        json={"sku": "LP-1001", "colorCode": "NEG", "sizeCode": "M", "stock": 4},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json() == {"variantId": variant_id, "stock": 4}
    assert stock_of(variant_id) == 4
    movement = db.query(StockMovement).filter(StockMovement.variant_id == variant_id).one()
    assert movement.movement_type == "AJUSTE_MANUAL"
    assert (movement.previous_stock, movement.new_stock, movement.quantity_change) == (10, 4, -6)


def test_patch_stock_without_reference(client, auth_headers):
    response = client.patch("/api/products/stock", json={"sku": "LP-1001", "stock": 4}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Debe enviar variantId o sku+colorCode+sizeCode"


def test_patch_stock_empty_body_is_reference_error(client, auth_headers):
    response = client.patch("/api/products/stock", json={}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Debe enviar variantId o sku+colorCode+sizeCode"


def test_patch_stock_requires_valid_stock(client, auth_headers, seed_variant, stock_of):
    variant_id = seed_variant(stock=10)

    missing = client.patch("/api/products/stock", json={"variantId": variant_id}, headers=auth_headers)
    negative = client.patch("/api/products/stock", json={"variantId": variant_id, "stock": -1}, headers=auth_headers)

    assert (missing.status_code, negative.status_code) == (400, 400)
    assert negative.json()["message"] == "Stock inválido"
    assert stock_of(variant_id) == 10


def test_patch_stock_unknown_variant(client, auth_headers, seed_variant):
    seed_variant()

    response = client.patch(
        "/api/products/stock",
        json={"sku": "LP-1001", "colorCode": "NEG", "sizeCode": "XXL", "stock": 4},
        headers=auth_headers,
    )

    assert response.status_code == 404
    assert response.json()["message"] == "Variante no encontrada"


def test_update_product_keeps_missing_fields(client, auth_headers):
    created = client.post(
        "/api/products",
        json={"sku": "LP-1001", "name": "Remera", "category": "Remeras", "base_price": 4500},
        headers=auth_headers,
    ).json()

    response = client.put(f"/api/products/{created['id']}", json={"name": "Remera Oversize"}, headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Remera Oversize"
    assert body["category"] == "Remeras"
    assert body["base_price"] == 4500


def test_update_missing_product(client, auth_headers):
    response = client.put("/api/products/no-existe", json={"name": "X"}, headers=auth_headers)

    assert response.status_code == 404


def test_external_ids(client, auth_headers, db, seed_variant):
    variant_id = seed_variant()
    product_id = client.get("/api/products/LP-1001", headers=auth_headers).json()["id"]

    response = client.put(
        f"/api/products/{product_id}/external-ids",
        json={"tiendaNubeId": "555", "mercadoLibreId": "MLA1"},
        headers=auth_headers,
    )
    assert response.json()["externalIds"] == {"tiendaNube": "555", "mercadoLibre": "MLA1"}

    response = client.put(
        f"/api/products/variants/{variant_id}/external-ids",
        json={"tiendaNubeVariantId": "777"},
        headers=auth_headers,
    )
    assert response.json()["externalIds"] == {"tiendaNube": "777", "mercadoLibre": None}

    detail = client.get("/api/products/LP-1001", headers=auth_headers).json()
    assert detail["externalIds"]["tiendaNube"] == "555"
    assert detail["variants"][0]["tienda_nube_variant_id"] == "777"


def test_add_variant_creates_color_and_size(client, auth_headers, db):
    product = client.post("/api/products", json={"sku": "LP-1001", "name": "Remera"}, headers=auth_headers).json()

    response = client.post(
        f"/api/products/{product['id']}/variants",
        json={"colorCode": "AZU", "colorName": "Azul", "sizeCode": "XL", "stock": 6},
        headers=auth_headers,
    )

    assert response.status_code == 201
    assert response.json()["stock"] == 6
    detail = client.get("/api/products/LP-1001", headers=auth_headers).json()
    assert detail["variants"][0]["color_code"] == "AZU"
    assert detail["variants"][0]["color_name"] == "Azul"
    assert detail["variants"][0]["stock"] == 6

    duplicate = client.post(
        f"/api/products/{product['id']}/variants",
        json={"colorCode": "AZU", "sizeCode": "XL"},
        headers=auth_headers,
    )
    assert duplicate.status_code == 409


def test_delete_all_products(client, auth_headers, db, seed_variant):
    seed_variant(stock=3)
    client.patch(
        "/api/products/stock",
        json={"sku": "LP-1001", "colorCode": "NEG", "sizeCode": "M", "stock": 1},
        headers=auth_headers,
    )

    response = client.delete("/api/products/all", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["deleted"]["products"] == 1
    assert "stock_movements" not in response.json()["deleted"]
    assert db.query(StockMovement).count() == 1
    assert client.get("/api/products", headers=auth_headers).json()["total"] == 0
    assert client.get("/api/colors", headers=auth_headers).json() == []
