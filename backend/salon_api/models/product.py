"""
Salon API — Product Document
=============================

What:  Shape of a catalog entry in the `products` collection.

Image bookkeeping:
    image_url is the media host's delivery URL; public_id is the media host's
    object identifier, recorded at upload time and used for deletion.
    Records written before public_id existed only carry image_url; the media
    service can derive the identifier from the URL for those.

Concurrency:
    version starts at 0 and is incremented by every update. Updates are
    written with a filter on the version they read, so two concurrent edits
    cannot silently overwrite each other.
"""

from datetime import datetime
from typing import Optional

from salon_api.models.base import MongoModel


class Product(MongoModel):
    """A catalog product as stored and returned by the API."""

    name: str
    price: float
    category: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    public_id: Optional[str] = None
    in_stock: bool = True
    stock: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None
    version: int = 0
