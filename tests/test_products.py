from app.models import OrderItem, ProductVariant

SIZES = {
    "id": "size",
    "name": "Size",
    "type": "size",
    "options": [{"id": "s", "name": "S", "value": "S"}, {"id": "m", "name": "M", "value": "M"}],
}


def create_product(client, **overrides):
    payload = {"name": "Camiseta", "slug": "camiseta", "base_price": 20.0, **overrides}
    response = client.post("/api/products", json=payload)
    assert response.status_code == 201
    return response.json()


def test_create_and_list_products(client):
    create_product(client)
    create_product(client, name="Agenda", slug="agenda", category="papeleria")

    names = [p["name"] for p in client.get("/api/products").json()]
    assert names == ["Agenda", "Camiseta"]

    filtered = client.get("/api/products", params={"category": "papeleria"}).json()
    assert [p["slug"] for p in filtered] == ["agenda"]


def test_create_product_duplicate_slug(client):
    create_product(client)

    response = client.post("/api/products", json={"name": "Otra", "slug": "camiseta"})

    assert response.status_code == 409


def test_preview_does_not_persist(client, db):
    product = create_product(client, variant_groups=[SIZES])

    response = client.post(f"/api/products/{product['id']}/variants/generate", json={})

    assert response.status_code == 200
    assert [c["sku"] for c in response.json()] == ["camiseta-s", "camiseta-m"]
    assert db.query(ProductVariant).count() == 0


def test_generate_variants_with_saved_groups(client):
    product = create_product(client, variant_groups=[SIZES])

    response = client.post(f"/api/products/{product['id']}/variants", json={"base_price": 25})

    assert response.status_code == 201
    variants = response.json()
    assert [v["sku"] for v in variants] == ["camiseta-s", "camiseta-m"]
    assert all(v["price"] == 25 for v in variants)


def test_generating_twice_only_adds_new_combinations(client):
    product = create_product(client, variant_groups=[SIZES])
    client.post(f"/api/products/{product['id']}/variants", json={})

    groups = [{**SIZES, "options": SIZES["options"] + [{"id": "l", "name": "L", "value": "L"}]}]
    response = client.post(f"/api/products/{product['id']}/variants", json={"groups": groups})

    assert [v["sku"] for v in response.json()] == ["camiseta-l"]
    assert len(client.get(f"/api/products/{product['id']}/variants").json()) == 3
    saved = client.get(f"/api/products/{product['id']}").json()["variant_groups"]
    assert len(saved[0]["options"]) == 3


def test_generate_variants_with_colliding_option_values(client):
    groups = [
        {
            "id": "size",
            "name": "Size",
            "options": [{"id": "ab", "name": "A-B", "value": "a-b"}, {"id": "a", "name": "A", "value": "a"}],
        },
        {
            "id": "color",
            "name": "Color",
            "options": [{"id": "c", "name": "C", "value": "c"}, {"id": "bc", "name": "B-C", "value": "b-c"}],
        },
    ]
    product = create_product(client)

    response = client.post(f"/api/products/{product['id']}/variants", json={"groups": groups})

    assert response.status_code == 201
    skus = [v["sku"] for v in response.json()]
    assert len(skus) == 4
    assert len(set(skus)) == 4
    assert "camiseta-a-b-c-2" in skus


def test_generate_without_groups(client):
    product = create_product(client)

    response = client.post(f"/api/products/{product['id']}/variants", json={})

    assert response.status_code == 400


def test_update_variant(client):
    product = create_product(client, variant_groups=[SIZES])
    variant = client.post(f"/api/products/{product['id']}/variants", json={}).json()[0]

    response = client.patch(f"/api/product-variants/{variant['id']}", json={"stock": 12, "price": 21.5})

    assert response.status_code == 200
    assert response.json()["stock"] == 12
    assert response.json()["price"] == 21.5


def test_update_variant_duplicate_sku(client):
    product = create_product(client, variant_groups=[SIZES])
    first, second = client.post(f"/api/products/{product['id']}/variants", json={}).json()

    response = client.patch(f"/api/product-variants/{first['id']}", json={"sku": second["sku"]})

    assert response.status_code == 409


def test_delete_option_removes_its_variants(client):
    product = create_product(client, variant_groups=[SIZES])
    client.post(f"/api/products/{product['id']}/variants", json={})

    response = client.delete(f"/api/products/{product['id']}/variant-groups/size/options/s")

    assert response.status_code == 200
    assert [o["id"] for o in response.json()["variant_groups"][0]["options"]] == ["m"]
    remaining = client.get(f"/api/products/{product['id']}/variants").json()
    assert [v["sku"] for v in remaining] == ["camiseta-m"]


def test_delete_group_keeps_ordered_variants_inactive(client, db, make_order):
    product = create_product(client, variant_groups=[SIZES])
    variants = client.post(f"/api/products/{product['id']}/variants", json={}).json()
    order = make_order()

    db.add(
        OrderItem(
            order_id=order.id,
            product_id=product["id"],
            variant_id=variants[0]["id"],
            quantity=1,
            unit_price=20,
            total_price=20,
        )
    )
    db.commit()

    response = client.delete(f"/api/products/{product['id']}/variant-groups/size")

    assert response.status_code == 200
    assert response.json()["variant_groups"] == []
    remaining = client.get(f"/api/products/{product['id']}/variants").json()
    assert [(v["sku"], v["is_active"]) for v in remaining] == [("camiseta-s", False)]


def test_delete_unknown_group(client):
    product = create_product(client)

    response = client.delete(f"/api/products/{product['id']}/variant-groups/missing")

    assert response.status_code == 404
