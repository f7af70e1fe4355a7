# app/schemas/order.py
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Scalar = int | float | str


class OrderItemIn(BaseModel):
    """
    A single line of a submitted order.
    """

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    weight: Scalar | None = None


class OrderSubmission(BaseModel):
    """
    Order payload posted by the storefront checkout.

    JSON keys are camelCase (customerName, totalAmount, ...). `total` is
    accepted as an alias of `totalAmount` for older storefront builds.

    Every field is optional at the schema level; which ones are required
    is decided by ORDER_REQUIRED_FIELDS in the service, so a missing
    field yields a 400 in the order response shape.
    """

    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    customer_name: str | None = None
    phone: Scalar | None = None
    address: str | None = None
    items: list[OrderItemIn] | None = None
    total_amount: Scalar | None = Field(
        default=None,
        validation_alias=AliasChoices("totalAmount", "total", "total_amount"),
    )
    payment_method: str | None = None
    order_id: Scalar | None = None


class OrderAck(BaseModel):
    """
    Response body for POST /orders.
    """

    success: bool
    message: str


def order_field_names() -> dict[str, str]:
    """
    Every name an order field is accepted under -> model attribute.

    e.g. "customerName" and "customer_name" -> "customer_name",
    "totalAmount" and "total" -> "total_amount".
    """
    names: dict[str, str] = {}
    for attr, field in OrderSubmission.model_fields.items():
        names[attr] = attr
        if field.alias:
            names[field.alias] = attr
        if isinstance(field.validation_alias, AliasChoices):
            for choice in field.validation_alias.choices:
                if isinstance(choice, str):
                    names[choice] = attr
        elif isinstance(field.validation_alias, str):
            names[field.validation_alias] = attr
    return names
