"""
Order Models - orders, order lines and shopping cart lines.

Order lines keep the attribute selection and, for bundles sold per item, the
per-component purchase data captured at order time. Products referenced by an
order line are protected and can never be purged from the catalog.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Mapping

from django.core.validators import MinValueValidator
from django.db import models

from catalog.attributes import AttributeSelection, parse_int
from catalog.exceptions import InvalidAttributeSelection
from catalog.models import Product, ProductBundleItem


@dataclass(frozen=True)
class BundleItemOrderData:
    """Purchase data of one bundle component recorded on an order line."""
    product_id: int
    quantity: int = 1
    attribute_selection: AttributeSelection = field(default_factory=AttributeSelection)


class Order(models.Model):

    class Status(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        PROCESSING = 'PROCESSING', 'Processing'
        COMPLETE = 'COMPLETE', 'Complete'
        CANCELLED = 'CANCELLED', 'Cancelled'

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    total_amount = models.DecimalField(max_digits=18, decimal_places=4, default=Decimal('0'))
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Order #{self.id} ({self.status})"


class OrderItem(models.Model):
    """
    A product line of an order.

    ``bundle_data`` is a list of ``{"product_id", "quantity",
    "attribute_selection"}`` objects, one per bundle component, and is only
    filled for bundles whose items are put into the cart individually.
    """
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,  # Ordered products cannot be deleted
        related_name='order_items'
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=18, decimal_places=4, default=Decimal('0'))
    attribute_selection = models.JSONField(default=dict, blank=True)
    bundle_data = models.JSONField(null=True, blank=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.quantity}x {self.product_id}"

    @property
    def subtotal(self) -> Decimal:
        return self.quantity * self.unit_price

    def get_attribute_selection(self) -> AttributeSelection:
        return AttributeSelection.from_raw(self.attribute_selection)

    def get_bundle_data(self) -> List[BundleItemOrderData]:
        """
        Decode ``bundle_data``. Entries without a product ID are skipped; a
        missing quantity means 1, a recorded 0 is kept.

        Raises:
            InvalidAttributeSelection: If an entry is not an object or holds
                a non-integer product ID or quantity
        """
        entries = []
        for raw in self.bundle_data or []:
            if not isinstance(raw, Mapping):
                raise InvalidAttributeSelection(f"Invalid bundle item data: {raw!r}")

            product_id = raw.get('product_id')
            if not product_id:
                continue
            entries.append(BundleItemOrderData(
                product_id=parse_int(product_id, 'bundle item product id'),
                quantity=parse_int(raw.get('quantity', 1), 'bundle item quantity'),
                attribute_selection=AttributeSelection.from_raw(raw.get('attribute_selection')),
            ))
        return entries


class ShoppingCartItem(models.Model):
    """
    A shopping cart line. Lines of a per-item bundle reference the bundle item
    they were added for. That reference has no database cascade.
    """
    customer_id = models.PositiveIntegerField(db_index=True)
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='shopping_cart_items')
    bundle_item = models.ForeignKey(
        ProductBundleItem,
        null=True,
        blank=True,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name='+'
    )
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    attribute_selection = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.quantity}x {self.product_id} (customer {self.customer_id})"
