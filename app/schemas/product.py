# app/schemas/product.py
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel


class ProductRead(SQLModel):
    """
    Product representation for clients.
    """

    id: int
    title: str
    description: str | None = None
    image: str
    weight: str | None = None
    category: str
    created_at: datetime


class ProductInput(SQLModel):
    """
    Product fields collected from a multipart form.

    Used for both create and update:
      - create: required fields are checked by the service
      - update: every field is optional, None means "keep stored value"

    Blank strings are normalized to None so an empty form field never
    overwrites stored data.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = None
    weight: str | None = None
    category: str | None = None
    image_url: str | None = None

    @field_validator("title", "description", "weight", "category", "image_url")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


# Form field name (as the storefront sends it) -> ProductInput attribute
PRODUCT_FORM_FIELDS: dict[str, str] = {
    "title": "title",
    "description": "description",
    "weight": "weight",
    "category": "category",
    "imageUrl": "image_url",
}
