# app/repositories/order_repo.py
from sqlmodel import Session

from app.models.order import Order


class OrderRepository:
    """
    Data access layer for orders.

    Only used when ORDER_PERSIST is on. Commits immediately so the
    pooled connection is released before the notification goes out.
    """

    def create(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.commit()
        session.refresh(order)
        return order
