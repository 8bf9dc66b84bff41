def _register(client, **overrides):
    data = {
        "username": "carol",
        "email": "carol@example.com",
        "password": "hunter22",
        "first_name": "Carol",
    }
    data.update(overrides)
    return client.post("/api/auth/register", json=data)


def test_register_login_me(client):
    res = _register(client)
    assert res.status_code == 201
    assert res.json()["user"]["username"] == "carol"

    res = client.post("/api/auth/login", json={"email": "Carol@example.com", "password": "hunter22"})
    assert res.status_code == 200
    token = res.json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["email"] == "carol@example.com"


def test_duplicate_registration(client):
    _register(client)
    res = _register(client, username="carol2")
    assert res.status_code == 400
    assert res.json() == {"message": "User already exists"}


def test_bad_password(client):
    _register(client)
    res = client.post("/api/auth/login", json={"email": "carol@example.com", "password": "wrong"})
    assert res.status_code == 401
    assert res.json() == {"message": "Invalid credentials"}


def test_garbage_token(client):
    res = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401


def test_activity_log(client, buyer, seller, make_product, auth_headers):
    product = make_product(seller)
    client.post("/api/cart/add", json={"product_id": product.id}, headers=auth_headers(buyer))

    body = client.get("/api/logs/me", headers=auth_headers(buyer)).json()
    assert body["total"] == 1
    assert body["items"][0]["action"] == "CART_ADD"
    assert body["items"][0]["meta"]["product_id"] == product.id


def test_register_accepts_camel_case_names(client):
    res = client.post(
        "/api/auth/register",
        json={
            "username": "dave",
            "email": "dave@example.com",
            "password": "hunter22",
            "firstName": "Dave",
            "lastName": "Jones",
        },
    )

    assert res.status_code == 201
    assert res.json()["user"]["first_name"] == "Dave"
    assert res.json()["user"]["last_name"] == "Jones"
