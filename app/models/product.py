# app/models/product.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Storefront catalog entry.

    Columns:
      - id, title, description, image, weight, category, created_at
    """

    __tablename__ = "products"

    id: int | None = Field(
        default=None,
        primary_key=True,
        description="Server-assigned, increasing identifier",
    )

    title: str = Field(
        max_length=255,
        index=True,
        description="Display name of the product",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description",
    )

    image: str = Field(
        description="Public image URL (uploaded file or direct link)",
    )

    # Free text on purpose: "5 g", "1.2", "22 carat" all occur
    weight: str | None = Field(
        default=None,
        max_length=64,
    )

    category: str = Field(
        max_length=100,
        index=True,
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
