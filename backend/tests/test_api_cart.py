from models.cart import CartItem


def test_cart_requires_token(client):
    res = client.get("/api/cart")
    assert res.status_code == 401
    assert res.json() == {"message": "Could not validate credentials"}


def test_get_cart_creates_empty_cart(client, buyer, auth_headers):
    res = client.get("/api/cart", headers=auth_headers(buyer))
    assert res.status_code == 200
    body = res.json()
    assert body["user_id"] == buyer.id
    assert body["items"] == []
    assert body["total"] == 0


def test_add_merges_and_returns_hydrated_cart(client, buyer, seller, make_product, auth_headers):
    product = make_product(seller, title="Guitar", price=150.0)
    headers = auth_headers(buyer)

    client.post("/api/cart/add", json={"product_id": product.id, "quantity": 1}, headers=headers)
    res = client.post("/api/cart/add", json={"product_id": product.id, "quantity": 2}, headers=headers)

    assert res.status_code == 200
    body = res.json()
    assert len(body["items"]) == 1
    item = body["items"][0]
    assert item["quantity"] == 3
    assert item["product"]["title"] == "Guitar"
    assert item["product"]["seller"]["id"] == seller.id
    assert body["total"] == 450.0


def test_add_own_product_is_400(client, db, seller, make_product, auth_headers):
    product = make_product(seller)
    res = client.post("/api/cart/add", json={"product_id": product.id}, headers=auth_headers(seller))

    assert res.status_code == 400
    assert res.json() == {"message": "Cannot add your own product to cart"}
    db.expire_all()
    assert db.query(CartItem).count() == 0


def test_add_with_bad_body_is_400(client, buyer, auth_headers):
    res = client.post("/api/cart/add", json={"quantity": 1}, headers=auth_headers(buyer))
    assert res.status_code == 400
    assert "productId" in res.json()["message"]


def test_update_quantity_and_zero_removes(client, buyer, seller, make_product, auth_headers):
    product = make_product(seller)
    headers = auth_headers(buyer)
    item_id = client.post(
        "/api/cart/add", json={"product_id": product.id}, headers=headers
    ).json()["items"][0]["id"]

    res = client.put(f"/api/cart/update/{item_id}", json={"quantity": 4}, headers=headers)
    assert res.json()["items"][0]["quantity"] == 4

    res = client.put(f"/api/cart/update/{item_id}", json={"quantity": 0}, headers=headers)
    assert res.status_code == 200
    assert res.json()["items"] == []


def test_update_missing_line_is_404(client, buyer, auth_headers):
    res = client.put("/api/cart/update/999", json={"quantity": 2}, headers=auth_headers(buyer))
    assert res.status_code == 404
    assert res.json() == {"message": "Item not found in cart"}


def test_remove_and_clear(client, buyer, seller, make_product, auth_headers):
    headers = auth_headers(buyer)
    first = make_product(seller, title="Chair")
    second = make_product(seller, title="Sofa")
    client.post("/api/cart/add", json={"product_id": first.id}, headers=headers)
    body = client.post("/api/cart/add", json={"product_id": second.id}, headers=headers).json()

    res = client.delete(f"/api/cart/remove/{body['items'][0]['id']}", headers=headers)
    assert [i["product_id"] for i in res.json()["items"]] == [second.id]

    res = client.delete("/api/cart/clear", headers=headers)
    assert res.status_code == 200
    assert res.json()["items"] == []


def test_add_and_update_with_camel_case_body(client, buyer, seller, make_product, auth_headers):
    product = make_product(seller)
    headers = auth_headers(buyer)

    res = client.post("/api/cart/add", json={"productId": product.id, "quantity": 2}, headers=headers)
    assert res.status_code == 200
    item = res.json()["items"][0]
    assert item["product"]["id"] == product.id
    assert item["quantity"] == 2

    res = client.put(f"/api/cart/update/{item['id']}", json={"quantity": 1}, headers=headers)
    assert res.json()["items"][0]["quantity"] == 1
