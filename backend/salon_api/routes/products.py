"""
Salon API — Product Route Handlers
===================================

What:  HTTP surface for the product catalog under /api/products.
Why:   Create and update take multipart forms so an image can travel with
       the product fields.

Request Flow (POST / PUT):
    1. Client sends multipart/form-data with text fields and an optional 'image' file
    2. FastAPI parses the form (missing required fields → 400)
    3. The image is read into memory and handed to ProductService
    4. ProductService validates and uploads the image, then writes the product
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pymongo.asynchronous.database import AsyncDatabase

from salon_api.database import get_database
from salon_api.models.product import Product
from salon_api.schemas.common import ErrorResponse, MessageResponse
from salon_api.schemas.product import ImageUpload, ProductCreate, ProductUpdate
from salon_api.services.media_service import media_service
from salon_api.services.product_service import product_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])

_NOT_FOUND = {404: {"description": "Product not found", "model": ErrorResponse}}
_BAD_UPLOAD = {400: {"description": "Missing field or invalid image", "model": ErrorResponse}}


async def read_image(image: Optional[UploadFile]) -> Optional[ImageUpload]:
    """
    Reads an optional upload into memory; an empty file part counts as no image.

    At most max_size + 1 bytes are read, so an oversized file is rejected
    without being loaded. The multipart parser has already spooled the part
    to a temporary file and reports its size.

    Raises:
        ValidationError: the file exceeds the upload size limit
    """
    if image is None or not image.filename:
        return None

    limit = media_service.max_size
    content_type = image.content_type or ""
    try:
        if image.size is not None and image.size > limit:
            media_service.validate_image(image.filename, content_type, image.size)
        content = await image.read(limit + 1)
        if len(content) > limit:
            media_service.validate_image(image.filename, content_type, image.size or len(content))
    finally:
        await image.close()

    logger.info(
        "Received image: filename=%s, content_type=%s, size=%d bytes",
        image.filename, image.content_type, len(content),
    )
    return ImageUpload(
        filename=image.filename,
        content_type=image.content_type or "",
        content=content,
    )


@router.get(
    "",
    response_model=List[Product],
    summary="List all products, newest first",
)
async def list_products(db: AsyncDatabase = Depends(get_database)) -> List[Product]:
    return await product_service.list_products(db)


@router.get(
    "/category/{category}",
    response_model=List[Product],
    summary="List products in a category",
    description="Exact, case-sensitive match on the category name, newest first.",
)
async def list_products_by_category(
    category: str,
    db: AsyncDatabase = Depends(get_database),
) -> List[Product]:
    return await product_service.list_by_category(db, category)


@router.get(
    "/{product_id}",
    response_model=Product,
    responses=_NOT_FOUND,
    summary="Get a single product by ID",
)
async def get_product(
    product_id: str,
    db: AsyncDatabase = Depends(get_database),
) -> Product:
    return await product_service.get_product(db, product_id)


@router.post(
    "",
    status_code=201,
    response_model=Product,
    responses=_BAD_UPLOAD,
    summary="Create a product",
    description=(
        "Multipart form. Optional 'image' file (jpeg, jpg, png or gif, max 5MB) "
        "is uploaded to the media host before the product is stored."
    ),
)
async def create_product(
    name: str = Form(...),
    price: float = Form(..., allow_inf_nan=False),
    category: str = Form(...),
    description: Optional[str] = Form(None),
    stock: Optional[int] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: AsyncDatabase = Depends(get_database),
) -> Product:
    payload = ProductCreate(
        name=name,
        price=price,
        category=category,
        description=description,
        stock=stock or 0,
    )
    upload = await read_image(image)
    return await product_service.create_product(db, payload, upload)


@router.put(
    "/{product_id}",
    response_model=Product,
    responses={
        **_BAD_UPLOAD,
        **_NOT_FOUND,
        409: {"description": "Product changed by another request", "model": ErrorResponse},
    },
    summary="Update a product",
    description=(
        "Multipart form. Fields left out keep their stored value. A new 'image' "
        "replaces the stored one; the previous image is removed from the media host."
    ),
)
async def update_product(
    product_id: str,
    name: Optional[str] = Form(None),
    price: Optional[float] = Form(None, allow_inf_nan=False),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    stock: Optional[int] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: AsyncDatabase = Depends(get_database),
) -> Product:
    payload = ProductUpdate(
        name=name,
        price=price,
        category=category,
        description=description,
        stock=stock,
    )
    upload = await read_image(image)
    return await product_service.update_product(db, product_id, payload, upload)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
    summary="Delete a product and its image",
)
async def delete_product(
    product_id: str,
    db: AsyncDatabase = Depends(get_database),
) -> MessageResponse:
    await product_service.delete_product(db, product_id)
    return MessageResponse(message="Product deleted successfully")
