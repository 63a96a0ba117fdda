from typing import List

from fastapi import APIRouter, Depends, status

from freshmarket.api.dependencies import get_admin_service
from freshmarket.auth.security import require_admin
from freshmarket.models.user import User as UserModel
from freshmarket.schemas.envelope import Envelope, success
from freshmarket.schemas.pagination import PageMeta, PageParams, page_params
from freshmarket.schemas.user import AdminCreate, AdminUpdate, LoginRequest, User as UserSchema, UserWithToken
from freshmarket.services.users import AdminService

router = APIRouter()


@router.post("", response_model=Envelope[UserSchema], status_code=status.HTTP_201_CREATED)
def create_admin(
    admin: AdminCreate,
    service: AdminService = Depends(get_admin_service),
):
    db_admin = service.create(admin)
    return success(UserSchema.model_validate(db_admin), message="Admin created successfully", status_code=201)


@router.post("/login", response_model=Envelope[UserWithToken])
def login_admin(
    credentials: LoginRequest,
    service: AdminService = Depends(get_admin_service),
):
    return success(service.login(credentials), message="Admin logged in successfully")


@router.get("", response_model=Envelope[List[UserSchema]])
def read_admins(
    params: PageParams = Depends(page_params),
    service: AdminService = Depends(get_admin_service),
    current_user: UserModel = Depends(require_admin),
):
    admins = service.get_all(params)
    return success(
        [UserSchema.model_validate(a) for a in admins],
        message="Admins fetched successfully",
        pagination=PageMeta.build(params, service.count()),
    )


@router.get("/{admin_id}", response_model=Envelope[UserSchema])
def read_admin(
    admin_id: str,
    service: AdminService = Depends(get_admin_service),
    current_user: UserModel = Depends(require_admin),
):
    return success(UserSchema.model_validate(service.get_by_id(admin_id)), message="Admin fetched successfully")


@router.put("/{admin_id}", response_model=Envelope[UserSchema])
def update_admin(
    admin_id: str,
    admin: AdminUpdate,
    service: AdminService = Depends(get_admin_service),
    current_user: UserModel = Depends(require_admin),
):
    db_admin = service.update(admin_id, admin)
    return success(UserSchema.model_validate(db_admin), message="Admin updated successfully")


@router.delete("/{admin_id}", response_model=Envelope[UserSchema])
def delete_admin(
    admin_id: str,
    service: AdminService = Depends(get_admin_service),
    current_user: UserModel = Depends(require_admin),
):
    db_admin = service.soft_delete(admin_id)
    return success(UserSchema.model_validate(db_admin), message="Admin deleted successfully")


@router.delete("/{admin_id}/permanent", response_model=Envelope)
def permanently_delete_admin(
    admin_id: str,
    service: AdminService = Depends(get_admin_service),
    current_user: UserModel = Depends(require_admin),
):
    service.hard_delete(admin_id)
    return success(None, message="Admin permanently deleted successfully")
