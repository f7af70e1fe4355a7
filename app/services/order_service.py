# app/services/order_service.py
import logging
from collections.abc import Sequence
from typing import Literal

from fastapi import BackgroundTasks
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.exceptions import (
    AppError,
    DatabaseError,
    NotificationError,
    OrderError,
    ValidationError,
)
from app.core.notifier import Notifier
from app.models.order import Order
from app.repositories.order_repo import OrderRepository
from app.schemas.order import OrderAck, OrderSubmission, order_field_names

logger = logging.getLogger(__name__)

NotifyMode = Literal["background", "sync"]

NOT_PROVIDED = "Not provided"


def _text(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def format_order_message(order: OrderSubmission) -> str:
    """
    Render an order as the plain-text message sent to the shop admin.

    Never raises on missing optional fields; absent values are replaced
    by a placeholder or the line is left out.
    """
    lines = ["🛍 NEW ORDER"]

    order_id = _text(order.order_id)
    if order_id:
        lines.append(f"Order ID: {order_id}")

    lines.append(f"Name: {_text(order.customer_name) or '-'}")
    lines.append(f"Phone: {_text(order.phone) or '-'}")
    lines.append(f"Address: {_text(order.address) or NOT_PROVIDED}")

    if order.items:
        lines.append(f"Items ({len(order.items)}):")
        for idx, item in enumerate(order.items, start=1):
            title = _text(item.title) or "-"
            weight = _text(item.weight) or "-"
            lines.append(f"{idx}. {title} - {weight}")

    total = _text(order.total_amount)
    lines.append(f"Total: Rs {total}" if total else f"Total: {NOT_PROVIDED}")

    payment = _text(order.payment_method)
    if payment:
        lines.append(f"Payment: {payment}")

    return "\n".join(lines)


def send_in_background(notifier: Notifier, message: str, label: str) -> None:
    """
    Background-task wrapper: the response is already sent, so every
    failure ends here and is only logged.
    """
    try:
        notifier.notify(message)
    except NotificationError as e:
        logger.error(f"⚠️ Notification for {label} failed (ignored): {e.message}")
    except Exception:
        logger.exception(f"⚠️ Notification for {label} crashed (ignored)")


class OrderService:
    """
    Order intake.

    Steps:
      1. Validate the configured required fields (400, nothing else happens).
      2. Optionally persist the order (ORDER_PERSIST).
      3. Format the admin message.
      4. Notify according to the process-wide mode:
           - "background": acknowledge now, notify after the response;
             failures are logged only.
           - "sync": notify first; a failed notification is a 500.
    """

    def __init__(
        self,
        notifier: Notifier,
        mode: NotifyMode = "background",
        required_fields: Sequence[str] = ("customerName", "phone"),
        repo: OrderRepository | None = None,
        persist: bool = False,
    ):
        if mode not in ("background", "sync"):
            raise ValueError(f"Unknown order notify mode: {mode!r}")
        self.notifier = notifier
        self.mode = mode
        self.required_fields = list(required_fields)
        known = order_field_names()
        unknown = [name for name in self.required_fields if name not in known]
        if unknown:
            raise ValueError(f"Unknown required order field(s): {', '.join(unknown)}")
        self._attrs = {name: known[name] for name in self.required_fields}
        self.repo = repo or OrderRepository()
        self.persist = persist

    # -------- Validation --------

    def missing_fields(self, order: OrderSubmission) -> list[str]:
        missing = []
        for name in self.required_fields:
            value = getattr(order, self._attrs[name])
            if value is None:
                missing.append(name)
            elif isinstance(value, str) and not value.strip():
                missing.append(name)
            elif isinstance(value, list) and not value:
                missing.append(name)
        return missing

    def validate(self, order: OrderSubmission) -> None:
        missing = self.missing_fields(order)
        if missing:
            logger.warning(f"⚠️ Order rejected, missing: {', '.join(missing)}")
            raise ValidationError("Invalid order data")

    # -------- Intake --------

    def submit(
        self,
        session: Session,
        order: OrderSubmission,
        background_tasks: BackgroundTasks,
    ) -> OrderAck:
        try:
            return self._submit(session, order, background_tasks)
        except AppError as e:
            message = "Invalid order data" if isinstance(e, ValidationError) else "Order failed"
            raise OrderError(e, message) from e
        except Exception as e:
            logger.exception("🔥 ORDER ERROR")
            raise OrderError(AppError(), "Order failed") from e

    def _submit(
        self,
        session: Session,
        order: OrderSubmission,
        background_tasks: BackgroundTasks,
    ) -> OrderAck:
        self.validate(order)

        label = f"order {_text(order.order_id) or _text(order.phone)}"
        if self.persist:
            saved = self._save(session, order)
            label = f"order #{saved.id}"

        message = format_order_message(order)

        if self.mode == "sync":
            self.notifier.notify(message)
            logger.info(f"✅ {label} placed, admin notified")
        else:
            background_tasks.add_task(send_in_background, self.notifier, message, label)
            logger.info(f"✅ {label} placed, notification queued")

        return OrderAck(success=True, message="Order placed successfully")

    def _save(self, session: Session, order: OrderSubmission) -> Order:
        row = Order(
            customer_name=_text(order.customer_name) or "",
            phone=_text(order.phone) or "",
            address=_text(order.address),
            total_amount=_text(order.total_amount),
            payment_method=_text(order.payment_method),
            order_ref=_text(order.order_id),
            items=[item.model_dump() for item in order.items or []],
        )
        try:
            return self.repo.create(session, row)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"❌ Could not store order: {e}")
            raise DatabaseError() from e
