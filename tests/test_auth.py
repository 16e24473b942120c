"""
Authentication endpoints and token handling.
"""

from datetime import timedelta

from app.config import settings
from app.models import User
from app.utils.auth import create_access_token, verify_password
from tests.conftest import PASSWORD, auth_headers, make_user


def register_payload(**overrides):
    data = {
        "name": "Anita Rao",
        "email": "Anita@Example.com",
        "phone": "+919811112222",
        "password": "hunter22",
    }
    data.update(overrides)
    return data


def test_register(client, db_session):
    response = client.post("/api/v1/auth/register", json=register_payload())

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == "anita@example.com"
    assert data["user"]["role"] == "user"
    assert "password_hash" not in data["user"]

    cookie = response.headers["set-cookie"]
    assert "access_token=" in cookie
    assert f"Max-Age={settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60}" in cookie
    assert "HttpOnly" in cookie

    user = db_session.query(User).filter(User.email == "anita@example.com").one()
    assert verify_password("hunter22", user.password_hash)


def test_register_duplicate_email_or_phone(client, customer):
    response = client.post("/api/v1/auth/register", json=register_payload(email="RAVI@example.com"))
    assert response.status_code == 400
    assert response.json()["message"] == "User with this email already exists"

    response = client.post("/api/v1/auth/register", json=register_payload(phone=customer.phone))
    assert response.status_code == 400
    assert response.json()["message"] == "User with this phone already exists"


def test_register_validation(client):
    response = client.post("/api/v1/auth/register", json=register_payload(password="123"))
    assert response.status_code == 400
    assert response.json()["errors"]

    assert client.post("/api/v1/auth/register", json=register_payload(phone="abc")).status_code == 400


def test_login(client, customer, db_session):
    response = client.post("/api/v1/auth/login", json={"email": "ravi@example.com", "password": PASSWORD})

    assert response.status_code == 200
    token = response.json()["data"]["token"]
    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["data"]["user"]["id"] == customer.id

    db_session.refresh(customer)
    assert customer.last_login is not None


def test_login_wrong_password(client, customer):
    response = client.post("/api/v1/auth/login", json={"email": "ravi@example.com", "password": "nope"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


def test_login_deactivated(client, db_session):
    make_user(db_session, "off@example.com", "+919800000009", is_active=False)
    response = client.post("/api/v1/auth/login", json={"email": "off@example.com", "password": PASSWORD})
    assert response.status_code == 401


def test_admin_login(client, customer, admin):
    response = client.post("/api/v1/auth/admin-login", json={"email": "admin@axteam.com", "password": PASSWORD})
    assert response.status_code == 200
    assert response.json()["data"]["user"]["role"] == "admin"

    response = client.post("/api/v1/auth/admin-login", json={"email": "ravi@example.com", "password": PASSWORD})
    assert response.status_code == 403


def test_me_requires_token(client):
    response = client.get("/api/v1/auth/me")
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_expired_token(client, customer):
    token = create_access_token({"sub": str(customer.id), "role": "user"}, expires_delta=timedelta(minutes=-1))
    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["message"] == "Token expired"


def test_invalid_token(client, customer):
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_deactivated_user_token_rejected(client, customer, db_session):
    headers = auth_headers(customer)
    customer.is_active = False
    db_session.commit()
    assert client.get("/api/v1/auth/me", headers=headers).status_code == 401


def test_update_profile(client, customer_headers, other_customer):
    response = client.put("/api/v1/auth/profile", json={"name": " Ravi K "}, headers=customer_headers)
    assert response.status_code == 200
    assert response.json()["data"]["user"]["name"] == "Ravi K"

    response = client.put("/api/v1/auth/profile", json={"phone": other_customer.phone}, headers=customer_headers)
    assert response.status_code == 400


def test_change_password(client, customer, customer_headers, db_session):
    response = client.put(
        "/api/v1/auth/change-password",
        json={"current_password": "wrong", "new_password": "newsecret"},
        headers=customer_headers,
    )
    assert response.status_code == 400

    response = client.put(
        "/api/v1/auth/change-password",
        json={"current_password": PASSWORD, "new_password": "newsecret"},
        headers=customer_headers,
    )
    assert response.status_code == 200
    db_session.refresh(customer)
    assert verify_password("newsecret", customer.password_hash)


def test_logout_clears_cookie(client, customer):
    client.post("/api/v1/auth/login", json={"email": "ravi@example.com", "password": PASSWORD})
    assert client.get("/api/v1/auth/me").status_code == 200

    client.post("/api/v1/auth/logout")
    assert client.get("/api/v1/auth/me").status_code == 401
