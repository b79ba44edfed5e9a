def test_register_login_refresh_logout(anonymous_client, store):
    c = anonymous_client
    r = c.post("/api/auth/register", json={"username": "carol", "password": "password1", "dob": "1992-04-01", "address": "2 Elm St"})
    assert r.status_code == 200
    assert r.json() == {"message": "User registered successfully"}

    assert c.post("/api/auth/register", json={"username": "carol", "password": "password1"}).status_code == 400

    bad = c.post("/api/auth/login", json={"username": "carol", "password": "wrong"})
    assert bad.status_code == 401
    assert bad.json()["message"] == "Invalid credentials"

    session = c.post("/api/auth/login", json={"username": "carol", "password": "password1"}).json()
    assert session["user"]["username"] == "carol"

    profile = c.get("/api/user/profile", headers={"Authorization": f"Bearer {session['accessToken']}"})
    assert profile.status_code == 200
    assert profile.json()["address"] == "2 Elm St"

    assert c.post("/api/auth/refresh", json={}).status_code == 401
    assert c.post("/api/auth/refresh", json={"token": "forged"}).status_code == 403
    refreshed = c.post("/api/auth/refresh", json={"token": session["refreshToken"]})
    assert refreshed.status_code == 200
    assert "accessToken" in refreshed.json()

    out = c.post("/api/auth/logout", json={"token": session["refreshToken"]})
    assert out.json() == {"message": "Logged out successfully"}
    assert c.post("/api/auth/refresh", json={"token": session["refreshToken"]}).status_code == 403

def test_register_validation(anonymous_client, store):
    r = anonymous_client.post("/api/auth/register", json={"username": "dd", "password": "short"})
    assert r.status_code == 400
    assert "message" in r.json()

def test_protected_routes_need_a_token(anonymous_client):
    for method, path in (("get", "/api/cart"), ("post", "/api/checkout"), ("get", "/api/orders")):
        r = getattr(anonymous_client, method)(path)
        assert r.status_code == 401
        assert r.json()["message"] == "Not authorized, no token"

def test_register_password_and_username_rules(anonymous_client, store):
    c = anonymous_client
    for body in (
        {"username": "erin", "password": "onlyletters"},
        {"username": "erin", "password": "12345678"},
        {"username": "erin", "password": "a1"},
        {"username": "er in", "password": "password1"},
    ):
        assert c.post("/api/auth/register", json=body).status_code == 400
    assert store.rows("users") == []
    assert c.post("/api/auth/register", json={"username": "erin.b", "password": "password1"}).status_code == 200
