"""Per-request service construction for the routers.

Each service gets the request's session and the app-wide credential service;
tests override these through ``app.dependency_overrides``.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from freshmarket.auth.security import CredentialService, get_credentials
from freshmarket.db.session import get_db
from freshmarket.services.orders import OrderService
from freshmarket.services.products import ProductService
from freshmarket.services.uploads import UploadStore
from freshmarket.services.users import AdminService, RetailerService


def get_admin_service(
    db: Session = Depends(get_db),
    credentials: CredentialService = Depends(get_credentials),
) -> AdminService:
    return AdminService(db, credentials)


def get_retailer_service(
    db: Session = Depends(get_db),
    credentials: CredentialService = Depends(get_credentials),
) -> RetailerService:
    return RetailerService(db, credentials)


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(db)


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_upload_store(request: Request) -> UploadStore:
    return request.app.state.uploads
