import logging


def test_signup(client):
    response = client.post(
        "/auth/signup",
        json={"email": "alice@example.com", "password": "secret123", "name": "Alice"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["token"]
    assert data["user"]["email"] == "alice@example.com"
    assert data["user"]["provider"] == "email"
    assert "passwordHash" not in data["user"]


def test_signup_duplicate_email(client, signup):
    signup()
    response = client.post(
        "/auth/signup",
        json={"email": "alice@example.com", "password": "secret123", "name": "Alice"},
    )
    assert response.status_code == 409
    assert response.json() == {"error": "User already exists with this email"}


def test_signup_missing_fields(client):
    response = client.post("/auth/signup", json={"email": "alice@example.com"})
    assert response.status_code == 400
    assert response.json()["error"] == "Email, password, and name are required"


def test_signin(client, signup):
    signup()
    response = client.post("/auth/signin", json={"email": "alice@example.com", "password": "secret123"})
    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Alice"


def test_signin_wrong_password(client, signup):
    signup()
    response = client.post("/auth/signin", json={"email": "alice@example.com", "password": "nope-nope"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


def test_me(client, auth_headers):
    response = client.get("/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "alice@example.com"


def test_me_requires_token(client):
    response = client.get("/auth/me")
    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required"}


def test_me_rejects_garbage_token(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_refresh(client, auth_headers):
    response = client.post("/auth/refresh", headers=auth_headers)
    assert response.status_code == 200
    token = response.json()["token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200


def test_verification_code_flow(client, caplog):
    """Test issuing a code and exchanging it for a token."""
    with caplog.at_level(logging.INFO, logger="prompt_library.services.auth_service"):
        response = client.post("/auth/send-verification", json={"email": "code@example.com"})
    assert response.status_code == 200
    assert response.json()["success"] is True

    code = next(
        record.getMessage().rsplit(" ", 1)[-1]
        for record in caplog.records
        if record.getMessage().startswith("Verification code for code@example.com")
    )
    response = client.post("/auth/verify-code", json={"email": "code@example.com", "code": code})
    assert response.status_code == 200
    assert response.json()["user"]["verified"] is True


def test_verify_code_wrong_code(client):
    client.post("/auth/send-verification", json={"email": "code@example.com"})
    response = client.post("/auth/verify-code", json={"email": "code@example.com", "code": "XXXXXX"})
    assert response.status_code == 401
