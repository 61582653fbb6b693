"""
Celery tasks for catalog notifications.

Tasks:
    - send_quantity_below_notification: tell the store owner that a product
      ran low on stock
"""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(Exception,),
    retry_backoff=True
)
def send_quantity_below_notification(self, product: dict, language_id: int):
    """
    Notify the store owner that a product's stock fell below its threshold.

    Works on the snapshot taken when the stock was adjusted; the product is not
    reloaded, so the message reflects the quantity that triggered it even if
    the row has changed since.

    Args:
        product: Snapshot with ``id``, ``name``, ``sku``, ``stock_quantity``
            and ``notify_admin_for_quantity_below``
        language_id: Language of the message

    Returns:
        Dict with notification details
    """
    message = f"""
    ===============================================
    LOW STOCK - {product.get('name')} (#{product.get('id')})
    ===============================================
    SKU: {product.get('sku') or '-'}
    Stock quantity: {product.get('stock_quantity')}
    Notify below: {product.get('notify_admin_for_quantity_below')}
    Language: {language_id}
    ===============================================
    """

    logger.info(message)

    return {
        'status': 'success',
        'product_id': product.get('id'),
        'language_id': language_id,
    }
