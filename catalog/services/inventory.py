"""
Inventory Service - stock adjustment for products, variants, bundles and
attribute-linked products.

A single adjustment is propagated:
1. Bundles sold per item: to every component recorded on the order line
2. Otherwise to the product counter or the attribute combination counter,
   applying the product's low stock activity
3. To every product linked through a "product linkage" attribute value
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Sequence

from django.conf import settings
from django.db import transaction

from catalog.attributes import AttributeSelection, RawSelection
from catalog.exceptions import CatalogPreconditionError
from catalog.models import Product, ProductVariantAttributeValue
from catalog.notifications import notify_quantity_below

from .attributes import find_attribute_combination, materialize_attribute_values

logger = logging.getLogger(__name__)

# Maximum number of linked product IDs loaded per query.
LINKED_PRODUCT_BATCH_SIZE = 100


@dataclass
class AdjustInventoryResult:
    """Stock counter of the primary target before and after an adjustment."""
    stock_quantity_old: int = 0
    stock_quantity_new: int = 0


def _chunks(items: Sequence, size: int) -> Iterator[Sequence]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


@transaction.atomic
def adjust_order_item_inventory(order_item, decrease: bool, quantity: int) -> AdjustInventoryResult:
    """
    Adjust inventory for an order line.

    For bundles whose items are put into the cart individually, every
    component recorded in the line's bundle data is adjusted by
    ``quantity * recorded quantity`` and an empty result is returned; the
    bundle itself carries no stock in that mode.

    Raises:
        CatalogPreconditionError: If the order item or its product is missing
        InvalidAttributeSelection: If the line's selection or bundle data
            cannot be decoded
    """
    if order_item is None or order_item.product_id is None:
        raise CatalogPreconditionError("Order item and its product are required to adjust inventory")

    product = order_item.product

    if product.is_bundle and product.bundle_per_item_shopping_cart:
        bundle_data = order_item.get_bundle_data()
        if bundle_data:
            product_ids = list(dict.fromkeys(entry.product_id for entry in bundle_data))
            products = Product.objects.in_bulk(product_ids)

            for entry in bundle_data:
                component = products.get(entry.product_id)
                if component is None:
                    logger.debug(
                        f"Bundle #{product.id}: component #{entry.product_id} not found, skipping"
                    )
                    continue
                _adjust_product(
                    component, entry.attribute_selection, decrease, quantity * entry.quantity, products
                )

        return AdjustInventoryResult()

    return _adjust_product(product, order_item.get_attribute_selection(), decrease, quantity, {})


@transaction.atomic
def adjust_inventory(product, selection: RawSelection, decrease: bool, quantity: int) -> AdjustInventoryResult:
    """
    Adjust the inventory of a product.

    Args:
        product: Product to adjust
        selection: Selected attributes (``AttributeSelection``, stored JSON or
            ``None``). Identifies the combination for products managed by
            attributes and the linked products to adjust alongside.
        decrease: Decrease the stock if true, increase it otherwise
        quantity: Number of units

    Returns:
        Old and new stock quantity of the product or combination itself.
        Linked products are adjusted too but not reflected in the result.

    Raises:
        CatalogPreconditionError: If product is missing
        InvalidAttributeSelection: If selection cannot be decoded
    """
    if product is None:
        raise CatalogPreconditionError("Product is required to adjust inventory")

    return _adjust_product(product, AttributeSelection.from_raw(selection), decrease, quantity, {})


def _adjust_product(
    product: Product,
    selection: AttributeSelection,
    decrease: bool,
    quantity: int,
    products: Dict[int, Product]
) -> AdjustInventoryResult:
    """
    ``products`` maps IDs to the instances already loaded by this adjustment.
    A product reached more than once (as a bundle component and as a linked
    product, say) is always adjusted on the same instance.
    """
    products.setdefault(product.id, product)
    result = AdjustInventoryResult()
    method = product.manage_inventory_method

    if method == Product.ManageInventoryMethod.MANAGE_STOCK:
        result.stock_quantity_old = product.stock_quantity
        result.stock_quantity_new = (
            product.stock_quantity - quantity if decrease else product.stock_quantity + quantity
        )

        published = product.published
        disable_buy_button = product.disable_buy_button
        disable_wishlist_button = product.disable_wishlist_button

        if product.low_stock_activity == Product.LowStockActivity.DISABLE_BUY_BUTTON:
            disable_buy_button = product.min_stock_quantity >= result.stock_quantity_new
            disable_wishlist_button = product.min_stock_quantity >= result.stock_quantity_new
        elif product.low_stock_activity == Product.LowStockActivity.UNPUBLISH:
            published = product.min_stock_quantity <= result.stock_quantity_new

        product.stock_quantity = result.stock_quantity_new
        product.published = published
        product.disable_buy_button = disable_buy_button
        product.disable_wishlist_button = disable_wishlist_button
        product.save(update_fields=[
            'stock_quantity', 'published', 'disable_buy_button', 'disable_wishlist_button', 'updated_at'
        ])

        logger.debug(
            f"Product #{product.id}: stock {result.stock_quantity_old} -> {result.stock_quantity_new}"
        )

        if decrease and product.notify_admin_for_quantity_below > result.stock_quantity_new:
            notify_quantity_below(product, settings.CATALOG_DEFAULT_ADMIN_LANGUAGE_ID)

    elif method == Product.ManageInventoryMethod.MANAGE_STOCK_BY_ATTRIBUTES:
        combination = find_attribute_combination(product.id, selection)
        if combination is not None:
            result.stock_quantity_old = combination.stock_quantity
            result.stock_quantity_new = (
                combination.stock_quantity - quantity if decrease else combination.stock_quantity + quantity
            )
            combination.stock_quantity = result.stock_quantity_new
            combination.save(update_fields=['stock_quantity'])

            logger.debug(
                f"Combination #{combination.id} of product #{product.id}: "
                f"stock {result.stock_quantity_old} -> {result.stock_quantity_new}"
            )
        else:
            logger.debug(f"Product #{product.id}: no attribute combination for [{selection.as_key()}]")

    if selection:
        _adjust_linked_products(selection, decrease, quantity, products)

    return result


def _adjust_linked_products(
    selection: AttributeSelection,
    decrease: bool,
    quantity: int,
    products: Dict[int, Product]
) -> None:
    linkage_values: List[ProductVariantAttributeValue] = [
        value for value in materialize_attribute_values(selection)
        if value.value_type == ProductVariantAttributeValue.ValueType.PRODUCT_LINKAGE
        and value.linked_product_id
    ]

    for chunk in _chunks(linkage_values, LINKED_PRODUCT_BATCH_SIZE):
        missing_ids = list(dict.fromkeys(
            value.linked_product_id for value in chunk if value.linked_product_id not in products
        ))
        if missing_ids:
            products.update(Product.objects.in_bulk(missing_ids))

        for value in chunk:
            linked_product = products.get(value.linked_product_id)
            if linked_product is not None:
                _adjust_product(
                    linked_product, AttributeSelection(), decrease, quantity * value.quantity, products
                )
