"""
Tests for order lines, cart lines and the low stock notification task.

Test Cases:
1. Subtotal and attribute selection of an order line
2. Decoding of per-item bundle purchase data
3. Ordered products are protected from deletion
4. Cart lines of bundle items
5. Low stock notification task runs eagerly
"""
from decimal import Decimal

from django.db.models import ProtectedError
from django.test import TestCase

from catalog.attributes import AttributeSelection
from catalog.exceptions import InvalidAttributeSelection
from catalog.models import Product, ProductBundleItem
from catalog.tasks import send_quantity_below_notification
from orders.models import BundleItemOrderData, Order, OrderItem, ShoppingCartItem


class OrderItemTestCase(TestCase):
    """Test cases for order lines."""

    def setUp(self):
        self.bundle = Product.objects.create(
            name='Garden Set',
            price=Decimal('30.00'),
            product_type=Product.ProductType.BUNDLED,
            bundle_per_item_shopping_cart=True
        )
        self.spade = Product.objects.create(name='Spade', price=Decimal('12.50'))
        self.order = Order.objects.create()

    def test_subtotal(self):
        item = OrderItem.objects.create(
            order=self.order,
            product=self.spade,
            quantity=3,
            unit_price=Decimal('12.50')
        )

        self.assertEqual(item.subtotal, Decimal('37.50'))

    def test_attribute_selection(self):
        item = OrderItem.objects.create(
            order=self.order,
            product=self.spade,
            quantity=1,
            attribute_selection={'4': [8, 2]}
        )

        self.assertEqual(item.get_attribute_selection(), AttributeSelection({4: (2, 8)}))

    def test_bundle_data(self):
        """
        Given: A bundle line with purchase data for two components
        When: Decoding the bundle data
        Then: Entries keep their product, quantity and selection,
              entries without a product are skipped
        """
        item = OrderItem.objects.create(
            order=self.order,
            product=self.bundle,
            quantity=1,
            bundle_data=[
                {'product_id': self.spade.id, 'quantity': 2, 'attribute_selection': {'1': [3]}},
                {'product_id': 77},
                {'quantity': 5},
            ]
        )

        self.assertEqual(item.get_bundle_data(), [
            BundleItemOrderData(self.spade.id, 2, AttributeSelection({1: (3,)})),
            BundleItemOrderData(77, 1, AttributeSelection()),
        ])

    def test_bundle_data_keeps_recorded_zero_quantity(self):
        item = OrderItem(
            product=self.bundle,
            quantity=1,
            bundle_data=[{'product_id': self.spade.id, 'quantity': 0}]
        )

        self.assertEqual(item.get_bundle_data(), [BundleItemOrderData(self.spade.id, 0)])

    def test_malformed_bundle_data(self):
        for bundle_data in (
            ['not an object'],
            [{'product_id': 'x'}],
            [{'product_id': self.spade.id, 'quantity': 'two'}],
            [{'product_id': self.spade.id, 'quantity': None}],
        ):
            with self.subTest(bundle_data=bundle_data):
                item = OrderItem(product=self.bundle, quantity=1, bundle_data=bundle_data)

                with self.assertRaises(InvalidAttributeSelection):
                    item.get_bundle_data()

    def test_no_bundle_data(self):
        item = OrderItem.objects.create(order=self.order, product=self.spade, quantity=1)

        self.assertEqual(item.get_bundle_data(), [])

    def test_ordered_product_is_protected(self):
        OrderItem.objects.create(order=self.order, product=self.spade, quantity=1)

        with self.assertRaises(ProtectedError):
            self.spade.delete()


class ShoppingCartItemTestCase(TestCase):

    def test_cart_line_survives_bundle_item_removal(self):
        bundle = Product.objects.create(name='Garden Set', product_type=Product.ProductType.BUNDLED)
        spade = Product.objects.create(name='Spade')
        bundle_item = ProductBundleItem.objects.create(bundle_product=bundle, product=spade)
        cart_item = ShoppingCartItem.objects.create(customer_id=3, product=spade, bundle_item=bundle_item)

        ProductBundleItem.objects.filter(pk=bundle_item.pk).delete()

        self.assertTrue(ShoppingCartItem.objects.filter(pk=cart_item.pk).exists())


class QuantityBelowNotificationTaskTestCase(TestCase):

    def test_task_runs_eagerly(self):
        snapshot = {
            'id': 5,
            'name': 'Spade',
            'sku': 'SP-1',
            'stock_quantity': 1,
            'notify_admin_for_quantity_below': 3,
        }

        with self.assertLogs('catalog.tasks', level='INFO') as logs:
            result = send_quantity_below_notification.delay(snapshot, 2).get()

        self.assertEqual(result, {'status': 'success', 'product_id': 5, 'language_id': 2})
        self.assertIn('LOW STOCK - Spade (#5)', logs.output[0])
