"""
Store owner notifications raised by catalog operations.
"""
import logging

from .tasks import send_quantity_below_notification

logger = logging.getLogger(__name__)


def product_snapshot(product) -> dict:
    return {
        'id': product.id,
        'name': product.name,
        'sku': product.sku,
        'stock_quantity': product.stock_quantity,
        'notify_admin_for_quantity_below': product.notify_admin_for_quantity_below,
    }


def notify_quantity_below(product, language_id: int) -> None:
    """
    Queue the "quantity below" store owner notification for ``product``.

    Fire-and-forget: the message is built from the in-memory state of
    ``product`` and queuing failures never propagate to the caller.
    """
    try:
        send_quantity_below_notification.delay(product_snapshot(product), language_id)
        logger.info(f"Queued low stock notification for product #{product.id}")
    except Exception as e:
        # Stock adjustment must not fail because of the notification
        logger.error(f"Failed to queue low stock notification for product #{product.id}: {e}")
