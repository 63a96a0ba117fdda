from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from freshmarket.api.dependencies import get_product_service, get_upload_store
from freshmarket.auth.security import Principal, get_current_principal
from freshmarket.schemas.envelope import Envelope, success
from freshmarket.schemas.pagination import PageMeta, PageParams, page_params
from freshmarket.schemas.product import Product as ProductSchema, ProductCreate, ProductUpdate
from freshmarket.services.base import validate_input
from freshmarket.services.products import ProductService
from freshmarket.services.uploads import UploadStore

router = APIRouter()


@router.post(
    "",
    response_model=Envelope[ProductSchema],
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="Create a product from a multipart form with an image file. Requires a valid access token.",
)
def create_product(
    name: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    availability: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    retailer_id: Optional[str] = Form(None, alias="retailerId"),
    category: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    service: ProductService = Depends(get_product_service),
    uploads: UploadStore = Depends(get_upload_store),
    principal: Principal = Depends(get_current_principal),
):
    """
    Create a new product.

    - **name**: Product name (required)
    - **price**: Non-negative price (required)
    - **availability**: true/false (required)
    - **description**: Product description (required)
    - **retailerId**: ID of the owning retailer (required)
    - **category**: Poultry, Dairy, Cereals, Vegetables or Fruits (required)
    - **image**: Image file, JPG/JPEG/PNG/GIF/WEBP (required)
    """
    form = {
        "name": name,
        "price": price,
        "availability": availability,
        "description": description,
        "retailerId": retailer_id,
        "category": category,
    }
    has_image = image is not None and bool(image.filename)
    # validate with a placeholder so field errors are reported before the file is written
    payload = validate_input(ProductCreate, {**form, "image": "pending" if has_image else None})

    image_url = uploads.save(image, folder="products", field="image")
    payload = payload.model_copy(update={"image": image_url})
    try:
        db_product = service.create(payload)
    except Exception:
        uploads.discard(image_url)
        raise
    return success(ProductSchema.model_validate(db_product), message="Product created successfully", status_code=201)


@router.get(
    "",
    response_model=Envelope[List[ProductSchema]],
    summary="Get all products",
    description="Retrieve a paginated list of products that have not been deleted.",
)
def read_products(
    params: PageParams = Depends(page_params),
    service: ProductService = Depends(get_product_service),
    principal: Principal = Depends(get_current_principal),
):
    products = service.get_all(params)
    return success(
        [ProductSchema.model_validate(p) for p in products],
        message="Products fetched successfully",
        pagination=PageMeta.build(params, service.count()),
    )


@router.get(
    "/category/{category}",
    response_model=Envelope[List[ProductSchema]],
    summary="Get products by category",
)
def get_products_by_category(
    category: str,
    params: PageParams = Depends(page_params),
    service: ProductService = Depends(get_product_service),
    principal: Principal = Depends(get_current_principal),
):
    products = service.get_by_category(category, params)
    return success(
        [ProductSchema.model_validate(p) for p in products],
        message=f"Products in category {category} fetched successfully",
        pagination=PageMeta.build(params, service.count_by_category(category)),
    )


@router.get("/{product_id}", response_model=Envelope[ProductSchema], summary="Get product by ID")
def read_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
    principal: Principal = Depends(get_current_principal),
):
    return success(ProductSchema.model_validate(service.get_by_id(product_id)), message="Product fetched successfully")


@router.put(
    "/{product_id}",
    response_model=Envelope[ProductSchema],
    summary="Update a product",
    description="Replace every field of an existing product.",
)
def update_product(
    product_id: str,
    product: ProductUpdate,
    service: ProductService = Depends(get_product_service),
    principal: Principal = Depends(get_current_principal),
):
    db_product = service.update(product_id, product)
    return success(ProductSchema.model_validate(db_product), message="Product updated successfully")


@router.delete("/{product_id}", response_model=Envelope[ProductSchema], summary="Delete a product")
def delete_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
    principal: Principal = Depends(get_current_principal),
):
    db_product = service.soft_delete(product_id)
    return success(ProductSchema.model_validate(db_product), message="Product deleted successfully")


@router.delete("/{product_id}/permanent", response_model=Envelope, summary="Permanently delete a product")
def permanently_delete_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
    uploads: UploadStore = Depends(get_upload_store),
    principal: Principal = Depends(get_current_principal),
):
    existing = service.get_including_deleted(product_id)
    image_url = existing.image if existing is not None else None
    service.hard_delete(product_id)
    if image_url:
        uploads.discard(image_url)
    return success(None, message="Product permanently deleted successfully")
