# app/models/order.py
from datetime import datetime, timezone

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Submitted order, stored only when ORDER_PERSIST is enabled.

    Orders are otherwise forwarded to the admin over WhatsApp and discarded.
    """

    __tablename__ = "orders"

    id: int | None = Field(default=None, primary_key=True)

    customer_name: str = Field(max_length=255)
    phone: str = Field(max_length=64)
    address: str | None = None

    total_amount: str | None = Field(
        default=None,
        description="Total as sent by the storefront (kept verbatim)",
    )
    payment_method: str | None = None

    # Client-side order reference, if the storefront generated one
    order_ref: str | None = Field(default=None, index=True)

    items: list[dict] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False, default=list),
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
