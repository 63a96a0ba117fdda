from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from freshmarket.api.dependencies import get_product_service, get_retailer_service, get_upload_store
from freshmarket.auth.security import Principal, get_current_principal, require_admin
from freshmarket.models.user import User as UserModel
from freshmarket.schemas.envelope import Envelope, success
from freshmarket.schemas.pagination import PageMeta, PageParams, page_params
from freshmarket.schemas.user import LoginRequest, RetailerCreate, RetailerUpdate, User as UserSchema, UserWithToken
from freshmarket.services.base import validate_input
from freshmarket.services.products import ProductService
from freshmarket.services.uploads import UploadStore
from freshmarket.services.users import RetailerService

router = APIRouter()


@router.post("", response_model=Envelope[UserSchema], status_code=status.HTTP_201_CREATED)
def create_retailer(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    farm_name: Optional[str] = Form(None, alias="farmName"),
    location: Optional[str] = Form(None),
    profile_image: Optional[UploadFile] = File(None, alias="profileImage"),
    service: RetailerService = Depends(get_retailer_service),
    uploads: UploadStore = Depends(get_upload_store),
):
    """
    Register a retailer from a multipart form.

    - **name**, **email**, **password**, **farmName**, **location**: required
    - **profileImage**: optional image file (JPG, JPEG, PNG, GIF, WEBP)
    """
    # validate the form first so a rejected signup leaves no file behind
    payload = validate_input(
        RetailerCreate,
        {"name": name, "email": email, "password": password, "farmName": farm_name, "location": location},
    )

    image_url = None
    if profile_image is not None and profile_image.filename:
        image_url = uploads.save(profile_image, folder="retailers", field="profileImage")
        payload = payload.model_copy(update={"profile_image": image_url})

    try:
        db_retailer = service.create(payload)
    except Exception:
        if image_url:
            uploads.discard(image_url)
        raise
    return success(UserSchema.model_validate(db_retailer), message="Retailer created successfully", status_code=201)


@router.post("/login", response_model=Envelope[UserWithToken])
def login_retailer(
    credentials: LoginRequest,
    service: RetailerService = Depends(get_retailer_service),
):
    return success(service.login(credentials), message="Retailer logged in successfully")


@router.get("", response_model=Envelope[List[UserSchema]])
def read_retailers(
    params: PageParams = Depends(page_params),
    service: RetailerService = Depends(get_retailer_service),
    current_user: UserModel = Depends(require_admin),
):
    retailers = service.get_all(params)
    return success(
        [UserSchema.model_validate(r) for r in retailers],
        message="Retailers fetched successfully",
        pagination=PageMeta.build(params, service.count()),
    )


@router.get("/{retailer_id}", response_model=Envelope[UserSchema])
def read_retailer(
    retailer_id: str,
    service: RetailerService = Depends(get_retailer_service),
    principal: Principal = Depends(get_current_principal),
):
    return success(UserSchema.model_validate(service.get_by_id(retailer_id)), message="Retailer fetched successfully")


@router.put("/{retailer_id}", response_model=Envelope[UserSchema])
def update_retailer(
    retailer_id: str,
    retailer: RetailerUpdate,
    service: RetailerService = Depends(get_retailer_service),
    principal: Principal = Depends(get_current_principal),
):
    db_retailer = service.update(retailer_id, retailer)
    return success(UserSchema.model_validate(db_retailer), message="Retailer updated successfully")


@router.delete("/{retailer_id}", response_model=Envelope[UserSchema])
def delete_retailer(
    retailer_id: str,
    service: RetailerService = Depends(get_retailer_service),
    current_user: UserModel = Depends(require_admin),
):
    db_retailer = service.soft_delete(retailer_id)
    return success(UserSchema.model_validate(db_retailer), message="Retailer deleted successfully")


@router.delete("/{retailer_id}/permanent", response_model=Envelope)
def permanently_delete_retailer(
    retailer_id: str,
    service: RetailerService = Depends(get_retailer_service),
    products: ProductService = Depends(get_product_service),
    uploads: UploadStore = Depends(get_upload_store),
    current_user: UserModel = Depends(require_admin),
):
    retailer = service.get_including_deleted(retailer_id)
    # the retailer's products go with it through the foreign key cascade
    stored_files = [retailer.profile_image] if retailer is not None and retailer.profile_image else []
    stored_files.extend(products.images_for_retailer(retailer_id))

    service.hard_delete(retailer_id)
    for url in stored_files:
        uploads.discard(url)
    return success(None, message="Retailer permanently deleted successfully")
