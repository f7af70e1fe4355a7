# send_test_notification.py

from app.core.config import get_settings
from app.core.notifier import WhatsAppNotifier
from app.schemas.order import OrderSubmission
from app.services.order_service import format_order_message


def main():
    print("Sending test WhatsApp notification...")

    order = OrderSubmission(
        customer_name="Test Customer",
        phone="0000000000",
        address="Test address",
        items=[{"title": "Test item", "weight": "1 g"}],
        total_amount=1,
        order_id="TEST-ORDER",
    )

    notifier = WhatsAppNotifier.from_settings(get_settings())
    try:
        notifier.notify(format_order_message(order))
    finally:
        notifier.close()

    print("If no errors: message sent! Check the admin WhatsApp.")


if __name__ == "__main__":
    main()
