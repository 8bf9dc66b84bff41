import io

from models.product import PLACEHOLDER_IMAGE


def _payload(**overrides):
    data = {
        "title": "Mountain bike",
        "description": "Aluminium frame, new tyres",
        "category": "Sports & Recreation",
        "price": 250.0,
        "condition": "Good",
        "tags": ["bike", "outdoor"],
        "location": {"city": "Leeds", "country": "UK"},
    }
    data.update(overrides)
    return data


def test_create_product(client, seller, auth_headers):
    res = client.post("/api/products", json=_payload(), headers=auth_headers(seller))

    assert res.status_code == 201
    body = res.json()
    assert body["seller_id"] == seller.id
    assert body["images"] == [PLACEHOLDER_IMAGE]
    assert body["location"] == {"city": "Leeds", "state": None, "country": "UK"}
    assert body["is_available"] is True
    assert body["is_sold"] is False


def test_create_requires_auth(client):
    assert client.post("/api/products", json=_payload()).status_code == 401


def test_create_rejects_unknown_category_and_negative_price(client, seller, auth_headers):
    headers = auth_headers(seller)
    assert client.post("/api/products", json=_payload(category="Spaceships"), headers=headers).status_code == 400
    assert client.post("/api/products", json=_payload(price=-1), headers=headers).status_code == 400


def test_search_filters(client, buyer, seller, make_product):
    make_product(seller, title="Road bike", price=300.0, tags=["cycling"])
    make_product(seller, title="Kids bike", price=60.0)
    make_product(seller, title="Bookshelf", price=45.0, category="Furniture")
    make_product(seller, title="Sold bike", price=50.0, is_sold=True)
    make_product(seller, title="Hidden bike", price=50.0, is_available=False)

    body = client.get("/api/products", params={"search": "bike"}).json()
    assert {p["title"] for p in body["products"]} == {"Road bike", "Kids bike"}
    assert body["total"] == 2

    body = client.get("/api/products", params={"category": "Furniture"}).json()
    assert [p["title"] for p in body["products"]] == ["Bookshelf"]

    body = client.get("/api/products", params={"minPrice": 50, "maxPrice": 100, "category": "all"}).json()
    assert [p["title"] for p in body["products"]] == ["Kids bike"]

    body = client.get("/api/products", params={"search": "cycling"}).json()
    assert [p["title"] for p in body["products"]] == ["Road bike"]


def test_search_pagination(client, seller, make_product):
    for i in range(5):
        make_product(seller, title=f"Item {i}")

    body = client.get("/api/products", params={"page": 2, "limit": 2}).json()
    assert body["total"] == 5
    assert body["total_pages"] == 3
    assert body["current_page"] == 2
    # newest first
    assert [p["title"] for p in body["products"]] == ["Item 2", "Item 1"]


def test_product_detail_counts_views(client, buyer, seller, make_product, auth_headers):
    product = make_product(seller)

    assert client.get(f"/api/products/{product.id}").json()["views"] == 1
    assert client.get(f"/api/products/{product.id}", headers=auth_headers(buyer)).json()["views"] == 2
    # the seller's own visits are not counted
    assert client.get(f"/api/products/{product.id}", headers=auth_headers(seller)).json()["views"] == 2


def test_product_detail_not_found(client):
    res = client.get("/api/products/424242")
    assert res.status_code == 404
    assert res.json() == {"message": "Product not found"}


def test_update_owner_only(client, buyer, seller, make_product, auth_headers):
    product = make_product(seller, price=10.0)

    res = client.put(f"/api/products/{product.id}", json={"price": 5.0}, headers=auth_headers(buyer))
    assert res.status_code == 401

    res = client.put(
        f"/api/products/{product.id}",
        json={"price": 12.0, "is_available": False},
        headers=auth_headers(seller),
    )
    assert res.status_code == 200
    assert res.json()["price"] == 12.0
    assert res.json()["is_available"] is False
    assert res.json()["title"] == product.title


def test_delete_removes_from_carts(client, buyer, seller, make_product, auth_headers):
    product = make_product(seller)
    client.post("/api/cart/add", json={"product_id": product.id}, headers=auth_headers(buyer))

    assert client.delete(f"/api/products/{product.id}", headers=auth_headers(buyer)).status_code == 401

    res = client.delete(f"/api/products/{product.id}", headers=auth_headers(seller))
    assert res.json() == {"message": "Product deleted successfully"}
    assert client.get("/api/cart", headers=auth_headers(buyer)).json()["items"] == []
    assert client.get(f"/api/products/{product.id}").status_code == 404


def test_sold_product_cannot_be_deleted(client, buyer, seller, make_product, auth_headers):
    product = make_product(seller)
    client.post("/api/cart/add", json={"product_id": product.id}, headers=auth_headers(buyer))
    client.post("/api/purchases/checkout", json={}, headers=auth_headers(buyer))

    res = client.delete(f"/api/products/{product.id}", headers=auth_headers(seller))
    assert res.status_code == 400


def test_my_listings_include_sold(client, seller, make_product, auth_headers):
    make_product(seller, title="Open")
    make_product(seller, title="Gone", is_sold=True)

    body = client.get("/api/products/user/my-listings", headers=auth_headers(seller)).json()
    assert {p["title"] for p in body} == {"Open", "Gone"}


def test_reference_lists(client):
    assert "Electronics" in client.get("/api/products/categories").json()
    assert client.get("/api/products/conditions").json() == ["New", "Like New", "Good", "Fair", "Poor"]


def test_image_upload(client, seller, make_product, auth_headers):
    product = make_product(seller, images=[PLACEHOLDER_IMAGE])
    files = {"file": ("photo.png", io.BytesIO(b"\x89PNG fake"), "image/png")}

    res = client.post(f"/api/products/{product.id}/images", files=files, headers=auth_headers(seller))

    assert res.status_code == 200
    images = res.json()["images"]
    assert len(images) == 1
    assert images[0].startswith("/uploads/") and images[0].endswith(".png")


def test_image_upload_rejects_other_types(client, seller, make_product, auth_headers):
    product = make_product(seller)
    files = {"file": ("notes.txt", io.BytesIO(b"hello"), "text/plain")}

    res = client.post(f"/api/products/{product.id}/images", files=files, headers=auth_headers(seller))
    assert res.status_code == 400
    assert res.json() == {"message": "Invalid file type"}


def test_search_treats_wildcards_literally(client, seller, make_product):
    make_product(seller, title="Lamp 50% off")
    make_product(seller, title="Desk lamp", description="snake_case free zone")
    make_product(seller, title="Armchair")

    body = client.get("/api/products", params={"search": "%"}).json()
    assert [p["title"] for p in body["products"]] == ["Lamp 50% off"]

    body = client.get("/api/products", params={"search": "_"}).json()
    assert [p["title"] for p in body["products"]] == ["Desk lamp"]


def test_search_matches_tags_one_by_one(client, seller, make_product):
    make_product(seller, title="Espresso machine", tags=["café", "kitchen"])
    make_product(seller, title="Plain chair", tags=["wood"])
    make_product(seller, title="Bare table")

    body = client.get("/api/products", params={"search": "café"}).json()
    assert [p["title"] for p in body["products"]] == ["Espresso machine"]

    # characters of a serialized list never match on their own
    for term in ['"', ",", "[", "café kitchen", "fékit"]:
        body = client.get("/api/products", params={"search": term}).json()
        assert body["total"] == 0, term


def test_search_sees_updated_tags(client, seller, make_product, auth_headers):
    product = make_product(seller, title="Old radio", tags=["audio"])

    res = client.put(f"/api/products/{product.id}", json={"tags": ["vintage"]}, headers=auth_headers(seller))
    assert res.status_code == 200

    assert client.get("/api/products", params={"search": "audio"}).json()["total"] == 0
    assert client.get("/api/products", params={"search": "vintage"}).json()["total"] == 1


def test_update_accepts_camel_case_keys(client, seller, make_product, auth_headers):
    product = make_product(seller)

    res = client.put(f"/api/products/{product.id}", json={"isAvailable": False}, headers=auth_headers(seller))

    assert res.status_code == 200
    assert res.json()["is_available"] is False
