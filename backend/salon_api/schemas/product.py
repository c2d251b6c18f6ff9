"""
Salon API — Product Request Schemas
====================================

What:  Validated field sets for the multipart forms of POST and PUT
       /api/products, plus the in-memory image upload handed to the services.
Why:   Routes translate form fields into these models so services receive
       typed values instead of raw strings.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ImageUpload(BaseModel):
    """An uploaded image file, read fully into memory by the route."""

    filename: str
    content_type: str = ""
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class ProductCreate(BaseModel):
    """Fields of POST /api/products. Stock defaults to 0 when omitted."""

    name: str = Field(min_length=1)
    price: float = Field(allow_inf_nan=False)
    category: str = Field(min_length=1)
    description: Optional[str] = None
    stock: int = 0


class ProductUpdate(BaseModel):
    """
    Fields of PUT /api/products/{id}.

    None means "keep the stored value". Empty form fields arrive as None,
    so a blank text box never clears a value, while an explicit stock of 0
    still overwrites.
    """

    name: Optional[str] = None
    price: Optional[float] = Field(default=None, allow_inf_nan=False)
    category: Optional[str] = None
    description: Optional[str] = None
    stock: Optional[int] = None

    def changes(self) -> Dict[str, Any]:
        return {k: v for k, v in self.model_dump().items() if v is not None}
