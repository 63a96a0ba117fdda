"""
Unit tests for the entity services against an in-memory SQLite store.
They exercise the create / soft delete / hard delete lifecycle without HTTP.
"""

import pytest

from freshmarket.auth.security import CredentialService
from freshmarket.core.errors import DuplicateEmail, InvalidCredentials, NotFound, ValidationError
from freshmarket.db.init import init_db
from freshmarket.db.session import Database
from freshmarket.models.product import Product
from freshmarket.schemas.pagination import PageParams
from freshmarket.services.orders import OrderService
from freshmarket.services.products import ProductService
from freshmarket.services.users import AdminService, RetailerService


@pytest.fixture
def db():
    database = Database("sqlite:///:memory:")
    init_db(database)
    session = database.session()
    try:
        yield session
    finally:
        session.close()
        database.dispose()


@pytest.fixture
def credentials() -> CredentialService:
    return CredentialService(secret_key="unit-secret", bcrypt_rounds=4)


def _retailer(db, credentials, email="a@x.com"):
    return RetailerService(db, credentials).create(
        {"name": "R", "email": email, "password": "pw", "farmName": "Farm A", "location": "Nakuru"}
    )


def _product(db, retailer_id, **overrides):
    data = {
        "name": "Maize",
        "price": 30,
        "availability": True,
        "description": "90kg bag",
        "image": "/uploads/products/maize.png",
        "retailerId": retailer_id,
        "category": "Cereals",
    }
    data.update(overrides)
    return ProductService(db).create(data)


def test_admin_lifecycle(db, credentials) -> None:
    service = AdminService(db, credentials)
    admin = service.create({"name": "Root", "email": "root@x.com", "password": "pw"})

    assert service.get_by_id(admin.id).email == "root@x.com"
    assert service.count() == 1

    service.soft_delete(admin.id)
    with pytest.raises(NotFound):
        service.get_by_id(admin.id)
    with pytest.raises(NotFound):
        service.soft_delete(admin.id)
    assert service.get_all() == []

    service.hard_delete(admin.id)
    with pytest.raises(NotFound):
        service.hard_delete(admin.id)


def test_duplicate_email_case_insensitive(db, credentials) -> None:
    service = AdminService(db, credentials)
    service.create({"name": "Root", "email": "root@x.com", "password": "pw"})

    with pytest.raises(DuplicateEmail):
        service.create({"name": "Other", "email": "ROOT@x.com", "password": "pw"})


def test_update_to_taken_email_is_rejected(db, credentials) -> None:
    service = AdminService(db, credentials)
    service.create({"name": "One", "email": "one@x.com", "password": "pw"})
    two = service.create({"name": "Two", "email": "two@x.com", "password": "pw"})

    with pytest.raises(DuplicateEmail):
        service.update(two.id, {"name": "Two", "email": "one@x.com"})


def test_authenticate_ignores_deleted_users(db, credentials) -> None:
    service = RetailerService(db, credentials)
    retailer = _retailer(db, credentials)
    service.soft_delete(retailer.id)

    with pytest.raises(InvalidCredentials):
        service.authenticate({"email": "a@x.com", "password": "pw"})


def test_services_do_not_cross_roles(db, credentials) -> None:
    retailer = _retailer(db, credentials)

    with pytest.raises(NotFound):
        AdminService(db, credentials).get_by_id(retailer.id)
    with pytest.raises(NotFound):
        AdminService(db, credentials).hard_delete(retailer.id)


def test_product_needs_active_retailer(db, credentials) -> None:
    retailer = _retailer(db, credentials)
    RetailerService(db, credentials).soft_delete(retailer.id)

    with pytest.raises(ValidationError) as exc_info:
        _product(db, retailer.id)
    assert exc_info.value.field == "retailerId"


def test_product_list_is_stable_across_pages(db, credentials) -> None:
    retailer = _retailer(db, credentials)
    created = [_product(db, retailer.id, name=f"Bag {i}").id for i in range(6)]
    service = ProductService(db)

    page_one = [p.id for p in service.get_all(PageParams(page=1, limit=4))]
    page_two = [p.id for p in service.get_all(PageParams(page=2, limit=4))]

    assert len(page_one) == 4
    assert len(page_two) == 2
    assert sorted(page_one + page_two) == sorted(created)


def test_products_by_category_rejects_unknown(db) -> None:
    with pytest.raises(ValidationError):
        ProductService(db).get_by_category("Meat")


def test_hard_deleting_retailer_cascades(db, credentials) -> None:
    retailer = _retailer(db, credentials)
    product = _product(db, retailer.id)
    order = OrderService(db).create(
        {
            "productId": product.id,
            "clientName": "Jane",
            "phoneNumber": "0700",
            "email": "jane@example.com",
            "address": "Moi Avenue",
        }
    )

    RetailerService(db, credentials).hard_delete(retailer.id)

    assert db.get(Product, product.id) is None
    with pytest.raises(NotFound):
        OrderService(db).get_by_id(order.id)


def test_order_needs_active_product(db, credentials) -> None:
    retailer = _retailer(db, credentials)
    product = _product(db, retailer.id)
    ProductService(db).soft_delete(product.id)

    with pytest.raises(ValidationError) as exc_info:
        OrderService(db).create(
            {
                "productId": product.id,
                "clientName": "Jane",
                "phoneNumber": "0700",
                "email": "jane@example.com",
                "address": "Moi Avenue",
            }
        )
    assert exc_info.value.field == "productId"


def test_get_including_deleted_sees_soft_deleted_rows_in_scope(db, credentials) -> None:
    service = RetailerService(db, credentials)
    retailer = _retailer(db, credentials)
    service.soft_delete(retailer.id)

    found = service.get_including_deleted(retailer.id)
    assert found is not None
    assert found.is_deleted
    assert AdminService(db, credentials).get_including_deleted(retailer.id) is None
    assert service.get_including_deleted("missing") is None


def test_category_count_and_retailer_images(db, credentials) -> None:
    retailer = _retailer(db, credentials)
    service = ProductService(db)
    _product(db, retailer.id, image="/uploads/products/one.png")
    hidden = _product(db, retailer.id, image="/uploads/products/two.png")
    _product(db, retailer.id, category="Dairy", image="/uploads/products/three.png")
    service.soft_delete(hidden.id)

    assert service.count_by_category("Cereals") == 1
    assert sorted(service.images_for_retailer(retailer.id)) == [
        "/uploads/products/one.png",
        "/uploads/products/three.png",
        "/uploads/products/two.png",
    ]
