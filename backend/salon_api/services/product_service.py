"""
Salon API — Product Service (Catalog + Image Orchestration)
============================================================

What:  CRUD operations for catalog products, coordinating the optional
       product image with the media host.
Why:   The product write paths are the only ones touching two systems
       (MongoDB and Cloudinary); the ordering rules live here.
How:   Composes MediaService with database operations. The database handle
       is passed into every call.

Write ordering:
    Create:  upload image → insert product
             insert fails → delete the just-uploaded image (best-effort)
    Update:  read product → upload new image → versioned save → delete old image
             save loses the race → delete the new image, raise ConflictError
    Delete:  read product → delete image (best-effort) → delete product

    Deletions at the media host never abort the request. If one fails the
    media host keeps an orphaned image; this is logged and accepted.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from pydantic.alias_generators import to_camel
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from salon_api.database import PRODUCTS
from salon_api.exceptions import ConflictError, DatabaseError, NotFoundError
from salon_api.models.product import Product
from salon_api.schemas.product import ImageUpload, ProductCreate, ProductUpdate
from salon_api.services.booking_service import NEWEST_FIRST, parse_object_id
from salon_api.services.media_service import UploadedImage, media_service

logger = logging.getLogger(__name__)


class ProductService:
    """
    Business logic for catalog products.

    Responsibilities:
        - list_products() / list_by_category(): newest-first listings
        - get_product(): single product with not-found handling
        - create_product() / update_product() / delete_product(): writes,
          including the image lifecycle at the media host
    """

    async def list_products(self, db: AsyncDatabase) -> List[Product]:
        return await self._find(db, {}, "Failed to fetch products.")

    async def list_by_category(self, db: AsyncDatabase, category: str) -> List[Product]:
        """Exact, case-sensitive category match."""
        return await self._find(
            db, {"category": category}, "Failed to fetch products by category."
        )

    async def get_product(self, db: AsyncDatabase, product_id: str) -> Product:
        document = await self._find_one(db, product_id)
        return Product.from_document(document)

    async def create_product(
        self,
        db: AsyncDatabase,
        payload: ProductCreate,
        image: Optional[ImageUpload] = None,
    ) -> Product:
        """
        Stores a new product, uploading its image first when one is attached.

        Raises:
            ValidationError: image type or size not allowed (nothing stored)
            MediaStorageError: upload failed (nothing stored)
            DatabaseError: insert failed (uploaded image is removed again)
        """
        uploaded: Optional[UploadedImage] = None
        if image is not None:
            uploaded = await media_service.upload_image(
                image.filename, image.content_type, image.content
            )

        product = Product(
            **payload.model_dump(),
            image_url=uploaded.url if uploaded else None,
            public_id=uploaded.public_id if uploaded else None,
            created_at=datetime.now(timezone.utc),
        )

        try:
            result = await db[PRODUCTS].insert_one(product.to_document())
        except PyMongoError as e:
            logger.error("Database error creating product: %s", str(e), exc_info=True)
            if uploaded:
                await media_service.delete_image(uploaded.public_id)
            raise DatabaseError(message="Failed to create product.") from e

        product.id = str(result.inserted_id)
        logger.info("Product created: %s (category=%s, image=%s)",
                    product.id, product.category, bool(uploaded))
        return product

    async def update_product(
        self,
        db: AsyncDatabase,
        product_id: str,
        payload: ProductUpdate,
        image: Optional[ImageUpload] = None,
    ) -> Product:
        """
        Partial update. Fields left out keep their stored value.

        When a new image is supplied, the previous image is deleted at the
        media host after the new one has been saved; a failed deletion is
        logged and the update still succeeds.

        Raises:
            NotFoundError: id does not resolve
            ConflictError: the product changed since it was read
            ValidationError / MediaStorageError: new image rejected or upload failed
        """
        current = await self._find_one(db, product_id)
        existing = Product.from_document(current)

        changes = payload.changes()
        uploaded: Optional[UploadedImage] = None
        if image is not None:
            uploaded = await media_service.upload_image(
                image.filename, image.content_type, image.content
            )
            changes["image_url"] = uploaded.url
            changes["public_id"] = uploaded.public_id
        changes["updated_at"] = datetime.now(timezone.utc)

        stored_changes = {
            to_camel(name): value
            for name, value in changes.items()
        }

        try:
            # Missing version (legacy document) matches {"version": None}
            document = await db[PRODUCTS].find_one_and_update(
                {"_id": current["_id"], "version": current.get("version")},
                {"$set": stored_changes, "$inc": {"version": 1}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error("Database error updating product %s: %s", product_id, str(e))
            if uploaded:
                await media_service.delete_image(uploaded.public_id)
            raise DatabaseError(
                message="Failed to update product.",
                context={"product_id": product_id},
            ) from e

        if document is None:
            logger.warning("Concurrent update detected for product %s", product_id)
            if uploaded:
                await media_service.delete_image(uploaded.public_id)
            raise ConflictError(context={"product_id": product_id})

        if uploaded:
            previous = media_service.resolve_public_id(existing.public_id, existing.image_url)
            if previous and previous != uploaded.public_id:
                await media_service.delete_image(previous)

        logger.info("Product updated: %s (fields=%s)", product_id, sorted(stored_changes))
        return Product.from_document(document)

    async def delete_product(self, db: AsyncDatabase, product_id: str) -> None:
        """
        Deletes the product's image (best-effort), then the product itself.
        """
        current = await self._find_one(db, product_id)
        existing = Product.from_document(current)

        public_id = media_service.resolve_public_id(existing.public_id, existing.image_url)
        if public_id and not await media_service.delete_image(public_id):
            logger.warning(
                "Product %s deleted but its image %s may remain at the media host",
                product_id, public_id,
            )

        try:
            result = await db[PRODUCTS].delete_one({"_id": current["_id"]})
        except PyMongoError as e:
            logger.error("Database error deleting product %s: %s", product_id, str(e))
            raise DatabaseError(
                message="Failed to delete product.",
                context={"product_id": product_id},
            ) from e

        if result.deleted_count == 0:
            raise NotFoundError(resource="product", resource_id=product_id)
        logger.info("Product deleted: %s", product_id)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _find(self, db: AsyncDatabase, query: dict, failure_message: str) -> List[Product]:
        try:
            documents = await db[PRODUCTS].find(query).sort(NEWEST_FIRST).to_list(length=None)
        except PyMongoError as e:
            logger.error("Database error listing products %s: %s", query, str(e), exc_info=True)
            raise DatabaseError(message=failure_message) from e
        return [Product.from_document(doc) for doc in documents]

    async def _find_one(self, db: AsyncDatabase, product_id: str) -> dict:
        oid = parse_object_id(product_id, "product")
        try:
            document = await db[PRODUCTS].find_one({"_id": oid})
        except PyMongoError as e:
            logger.error("Database error fetching product %s: %s", product_id, str(e))
            raise DatabaseError(
                message="Failed to fetch product.",
                context={"product_id": product_id},
            ) from e

        if document is None:
            raise NotFoundError(resource="product", resource_id=product_id)
        return document


product_service = ProductService()
