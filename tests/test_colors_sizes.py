from sqlalchemy import text

from app.services.catalog_service import CatalogService


def _replace_table(db, drop, create, rows_sql=()):
    db.execute(text(f"DROP TABLE {drop}"))
    db.execute(text(create))
    for sql in rows_sql:
        db.execute(text(sql))
    db.commit()


def test_colors_sorted_and_without_size_names(client, auth_headers, seed_variant):
    seed_variant(color_code="ROJ", color_name="Rojo")
    seed_variant(color_code="AZU", color_name="Azul")
    seed_variant(color_code="XL", color_name="XL")
    seed_variant(color_code="38", color_name="38")

    body = client.get("/api/colors", headers=auth_headers).json()

    assert [c["name"] for c in body] == ["Azul", "Rojo"]
    assert body[0] == {"id": body[0]["id"], "code": "AZU", "name": "Azul", "hex": "#000000"}


def test_colors_table_without_hex(client, auth_headers, db):
    _replace_table(
        db,
        "colors",
        "CREATE TABLE colors (id VARCHAR(36) PRIMARY KEY, code VARCHAR(100), name VARCHAR(255))",
        ["INSERT INTO colors (id, code, name) VALUES ('c1', 'NEG', 'Negro')"],
    )

    body = client.get("/api/colors", headers=auth_headers).json()

    assert body == [{"id": "c1", "code": "NEG", "name": "Negro", "hex": None}]


def test_find_or_create_color_on_legacy_table(db):
    _replace_table(
        db,
        "colors",
        "CREATE TABLE colors (id VARCHAR(36) PRIMARY KEY, code VARCHAR(100), name VARCHAR(255))",
    )

    color_id = CatalogService.find_or_create_color(db, "Verde Agua")
    db.commit()

    row = db.execute(text("SELECT code, name FROM colors WHERE id = :id"), {"id": color_id}).one()
    assert tuple(row) == ("VERDE AGUA", "Verde Agua")
    assert CatalogService.find_or_create_color(db, "Verde Agua") == color_id


def test_find_or_create_color_code_collision(db):
    first = CatalogService.find_or_create_color(db, "Negro")
    second = CatalogService.find_or_create_color(db, "negro")
    db.commit()

    codes = [r[0] for r in db.execute(text("SELECT code FROM colors ORDER BY name")).all()]
    assert first != second
    assert codes[0] == "NEGRO"
    assert codes[1].startswith("NEGRO") and codes[1] != "NEGRO"


def test_attributes_fallback(client, auth_headers, db):
    db.execute(text("DROP TABLE colors"))
    db.execute(text("DROP TABLE sizes"))
    db.execute(text(
        "CREATE TABLE attributes (id VARCHAR(36) PRIMARY KEY, type VARCHAR(20), name VARCHAR(100), value VARCHAR(20))"
    ))
    db.execute(text(
        "INSERT INTO attributes (id, type, name, value) VALUES "
        "('a1', 'color', 'Negro', '#000'), ('a2', 'color', 'M', NULL), ('a3', 'size', 'L', NULL)"
    ))
    db.commit()

    try:
        colors = client.get("/api/colors", headers=auth_headers).json()
        sizes = client.get("/api/sizes", headers=auth_headers).json()
    finally:
        db.execute(text("DROP TABLE attributes"))
        db.commit()

    assert colors == [{"id": "a1", "code": "Negro", "name": "Negro", "hex": "#000"}]
    assert sizes == [{"id": "a3", "code": "L", "name": "L"}]


def test_sizes_sorted_by_code(client, auth_headers, seed_variant):
    seed_variant(size_code="S")
    seed_variant(size_code="L")
    seed_variant(size_code="M")

    body = client.get("/api/sizes", headers=auth_headers).json()

    assert [s["code"] for s in body] == ["L", "M", "S"]


def test_sizes_table_with_legacy_columns(client, auth_headers, db):
    _replace_table(
        db,
        "sizes",
        "CREATE TABLE sizes (id VARCHAR(36) PRIMARY KEY, code VARCHAR(20))",
        ["INSERT INTO sizes (id, code) VALUES ('s1', 'XL')"],
    )

    body = client.get("/api/sizes", headers=auth_headers).json()

    assert body == [{"id": "s1", "code": "XL", "name": "XL"}]
