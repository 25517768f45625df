from tests.conftest import TEST_PIN


async def _login(client, password="admin123"):
    return await client.post("/auth/login", json={"username": "admin", "password": password})


async def test_login_and_me(anon_client):
    resp = await _login(anon_client)
    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["role"] == "admin"

    headers = {"Authorization": f"Bearer {body['access_token']}"}
    me = await anon_client.get("/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["username"] == "admin"


async def test_wrong_password(anon_client):
    assert (await _login(anon_client, "nope")).status_code == 401


async def test_missing_or_bad_token(anon_client):
    assert (await anon_client.get("/auth/me")).status_code == 401
    assert (await anon_client.get("/auth/me", headers={"Authorization": "Bearer garbage"})).status_code == 401


async def test_verify_pin(anon_client):
    token = (await _login(anon_client)).json()["access_token"]
    headers = {"token": token}

    resp = await anon_client.post("/auth/verify-pin", json={"pin": TEST_PIN}, headers=headers)
    assert resp.json() == {"valid": True}

    resp = await anon_client.post("/auth/verify-pin", json={"pin": "0000"}, headers=headers)
    assert resp.json() == {"valid": False}


async def test_role_check_rejects_other_roles(anon_client, db):
    from backoffice.core.security import hash_password
    from backoffice.models.user_models import User

    db.add(User(username="cashier", password_hash=hash_password("cash123"), role="cashier"))
    await db.commit()

    login = await anon_client.post("/auth/login", json={"username": "cashier", "password": "cash123"})
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    assert (await anon_client.get("/catalog/products", headers=headers)).status_code == 200
    assert (await anon_client.post("/branches", json={"name": "X"}, headers=headers)).status_code == 403
