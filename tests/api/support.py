# This file provides shared helpers for API endpoint tests.
# Every client gets its own in-memory database and upload directory, so tests never share rows.
# The mailer is replaced with a recorder; nothing here opens a network connection.
# Helpers below create users and log them in through the real endpoints.

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional

from fastapi.testclient import TestClient

from freshmarket.core.config import Settings
from freshmarket.main import create_app
from freshmarket.services.notifications import get_mailer

API = "/api/v1"

# smallest valid PNG header; the store only checks the extension
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def build_test_settings(upload_dir: Path, **overrides: Any) -> Settings:
    """Create deterministic settings for tests."""

    values: dict[str, Any] = {
        "database_url": "sqlite:///:memory:",
        "jwt_secret": "test-secret",
        "bcrypt_rounds": 4,
        "upload_dir": str(upload_dir),
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(**values)


class FakeMailer:
    """Records confirmation requests instead of sending them."""

    def __init__(self, *, succeed: bool = True) -> None:
        self.succeed = succeed
        self.sent: list[dict[str, Any]] = []

    def send_order_confirmation(self, **kwargs: Any) -> bool:
        self.sent.append(kwargs)
        return self.succeed


@contextmanager
def api_test_client(upload_dir: Path, *, mailer: Optional[Any] = None, **overrides: Any) -> Iterator[TestClient]:
    """Yield a TestClient over a fresh app with scoped dependency overrides."""

    app = create_app(build_test_settings(upload_dir, **overrides))
    if mailer is not None:
        app.dependency_overrides[get_mailer] = lambda: mailer

    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def create_admin(client: TestClient, *, email: str = "admin@x.com", password: str = "secret") -> dict[str, Any]:
    response = client.post(f"{API}/admins", json={"name": "Admin", "email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()["data"]


def login(client: TestClient, role: str, *, email: str, password: str = "secret") -> str:
    response = client.post(f"{API}/{role}s/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["data"]["accessToken"]


def admin_token(client: TestClient, *, email: str = "admin@x.com") -> str:
    create_admin(client, email=email)
    return login(client, "admin", email=email)


def create_retailer(
    client: TestClient,
    *,
    email: str = "a@x.com",
    farm_name: str = "Farm A",
    password: str = "secret",
    image: Optional[tuple[str, bytes, str]] = None,
) -> dict[str, Any]:
    form = {"name": "Retailer", "email": email, "password": password, "farmName": farm_name, "location": "Nakuru"}
    files = {"profileImage": image} if image is not None else None
    response = client.post(f"{API}/retailers", data=form, files=files)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def create_product(
    client: TestClient,
    token: str,
    retailer_id: str,
    *,
    name: str = "Eggs",
    category: str = "Poultry",
    price: str = "4.50",
) -> dict[str, Any]:
    form = {
        "name": name,
        "price": price,
        "availability": "true",
        "description": "Fresh tray",
        "retailerId": retailer_id,
        "category": category,
    }
    files = {"image": ("eggs.png", PNG_BYTES, "image/png")}
    response = client.post(f"{API}/products", data=form, files=files, headers=auth_header(token))
    assert response.status_code == 201, response.text
    return response.json()["data"]


def order_payload(product_id: str, **overrides: Any) -> dict[str, Any]:
    payload = {
        "productId": product_id,
        "clientName": "Jane",
        "phoneNumber": "0700000000",
        "email": "jane@example.com",
        "address": "Moi Avenue",
    }
    payload.update(overrides)
    return payload
