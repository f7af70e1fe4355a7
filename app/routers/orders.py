# app/routers/orders.py
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlmodel import Session

from app.core.config import Settings, get_settings
from app.core.notifier import Notifier, get_notifier
from app.database import get_session
from app.repositories.order_repo import OrderRepository
from app.schemas.order import OrderAck, OrderSubmission
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()


def get_order_service(
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> OrderService:
    return OrderService(
        notifier,
        mode=settings.ORDER_NOTIFY_MODE,
        required_fields=settings.ORDER_REQUIRED_FIELDS,
        repo=order_repo,
        persist=settings.ORDER_PERSIST,
    )


@router.post("", response_model=OrderAck)
def place_order(
    payload: OrderSubmission,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    service: OrderService = Depends(get_order_service),
):
    """
    Accept an order from the storefront checkout and notify the shop admin.

    ORDER_NOTIFY_MODE decides when the admin is notified:

      background -> 200 right after validation; WhatsApp is sent afterwards

      sync       -> WhatsApp is sent first; 500 if it cannot be delivered
    """
    return service.submit(session, payload, background_tasks)
