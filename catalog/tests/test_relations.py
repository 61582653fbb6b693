"""
Tests for mutual related / cross-sell product completion.
"""
from django.test import TestCase

from catalog.models import CrossSellProduct, RelatedProduct
from catalog.services import (
    RelationKind,
    complete_mutual_relations,
    ensure_mutually_cross_sell_products,
    ensure_mutually_related_products,
    get_cross_sell_products_by_product_ids,
)

from .utils import create_product


def related_edges():
    return set(RelatedProduct.objects.values_list('product1_id', 'product2_id'))


def cross_sell_edges():
    return set(CrossSellProduct.objects.values_list('product1_id', 'product2_id'))


class MutuallyRelatedProductsTestCase(TestCase):

    def setUp(self):
        self.a = create_product('A')
        self.b = create_product('B')
        self.c = create_product('C')

    def test_single_edge_gets_reciprocal(self):
        """
        Given: A -> B, and B already lists a (deleted) product at display order 5
        When: Completing A's cluster
        Then: B -> A is created with display order 6
        """
        gone = create_product('Gone', deleted=True)
        RelatedProduct.objects.create(product1=self.a, product2=self.b, display_order=1)
        RelatedProduct.objects.create(product1=self.b, product2=gone, display_order=5)

        created = ensure_mutually_related_products(self.a.id)

        self.assertEqual(created, 1)
        edge = RelatedProduct.objects.get(product1=self.b, product2=self.a)
        self.assertEqual(edge.display_order, 6)
        # Deleted products are not part of the cluster
        self.assertFalse(RelatedProduct.objects.filter(product1=gone).exists())
        self.assertFalse(RelatedProduct.objects.filter(product1=self.a, product2=gone).exists())

    def test_display_order_starts_at_one_without_edges(self):
        RelatedProduct.objects.create(product1=self.a, product2=self.b)

        ensure_mutually_related_products(self.a.id)

        self.assertEqual(RelatedProduct.objects.get(product1=self.b, product2=self.a).display_order, 1)

    def test_cluster_becomes_complete(self):
        RelatedProduct.objects.create(product1=self.a, product2=self.b, display_order=1)
        RelatedProduct.objects.create(product1=self.a, product2=self.c, display_order=2)

        created = ensure_mutually_related_products(self.a.id)

        self.assertEqual(created, 4)
        products = [self.a.id, self.b.id, self.c.id]
        expected = {(x, y) for x in products for y in products if x != y}
        self.assertEqual(related_edges(), expected)

    def test_new_display_orders_strictly_increase_per_product(self):
        RelatedProduct.objects.create(product1=self.a, product2=self.b, display_order=1)
        RelatedProduct.objects.create(product1=self.a, product2=self.c, display_order=2)

        ensure_mutually_related_products(self.a.id)

        for source in (self.b, self.c):
            orders = list(
                RelatedProduct.objects.filter(product1=source).order_by('id').values_list('display_order', flat=True)
            )
            self.assertEqual(orders, [1, 2])

    def test_existing_edges_keep_their_order(self):
        RelatedProduct.objects.create(product1=self.a, product2=self.b, display_order=3)
        RelatedProduct.objects.create(product1=self.a, product2=self.c, display_order=9)

        ensure_mutually_related_products(self.a.id)

        self.assertEqual(RelatedProduct.objects.get(product1=self.a, product2=self.b).display_order, 3)
        self.assertEqual(RelatedProduct.objects.get(product1=self.a, product2=self.c).display_order, 9)

    def test_second_run_creates_nothing(self):
        RelatedProduct.objects.create(product1=self.a, product2=self.b)
        RelatedProduct.objects.create(product1=self.a, product2=self.c)

        ensure_mutually_related_products(self.a.id)
        edges = related_edges()

        self.assertEqual(ensure_mutually_related_products(self.a.id), 0)
        self.assertEqual(related_edges(), edges)

    def test_reachable_products_join_the_cluster(self):
        """
        Given: A -> B and B -> C
        When: Completing A's cluster
        Then: All three products are connected in both directions
        """
        RelatedProduct.objects.create(product1=self.a, product2=self.b)
        RelatedProduct.objects.create(product1=self.b, product2=self.c)

        created = ensure_mutually_related_products(self.a.id)

        self.assertEqual(created, 4)
        self.assertIn((self.c.id, self.a.id), related_edges())
        self.assertIn((self.a.id, self.c.id), related_edges())

    def test_product_without_relations(self):
        self.assertEqual(ensure_mutually_related_products(self.a.id), 0)
        self.assertEqual(related_edges(), set())

    def test_self_relation_only(self):
        RelatedProduct.objects.create(product1=self.a, product2=self.a)

        self.assertEqual(ensure_mutually_related_products(self.a.id), 0)
        self.assertEqual(related_edges(), {(self.a.id, self.a.id)})


class MutuallyCrossSellProductsTestCase(TestCase):

    def setUp(self):
        self.a = create_product('A')
        self.b = create_product('B')
        self.c = create_product('C')

    def test_single_edge_gets_reciprocal(self):
        CrossSellProduct.objects.create(product1=self.a, product2=self.b)

        created = ensure_mutually_cross_sell_products(self.a.id)

        self.assertEqual(created, 1)
        self.assertEqual(cross_sell_edges(), {(self.a.id, self.b.id), (self.b.id, self.a.id)})

    def test_cluster_complete_and_idempotent(self):
        CrossSellProduct.objects.create(product1=self.a, product2=self.b)
        CrossSellProduct.objects.create(product1=self.a, product2=self.c)

        self.assertEqual(complete_mutual_relations(self.a.id, RelationKind.CROSS_SELL), 4)
        self.assertEqual(complete_mutual_relations(self.a.id, RelationKind.CROSS_SELL), 0)
        self.assertEqual(len(cross_sell_edges()), 6)

    def test_related_edges_are_not_used(self):
        RelatedProduct.objects.create(product1=self.a, product2=self.b)

        self.assertEqual(ensure_mutually_cross_sell_products(self.a.id), 0)
        self.assertEqual(cross_sell_edges(), set())


class CrossSellProductsByProductIdsTestCase(TestCase):

    def setUp(self):
        self.a = create_product('A')
        self.b = create_product('B')
        self.c = create_product('C')
        self.d = create_product('D', published=False)
        CrossSellProduct.objects.create(product1=self.a, product2=self.b)
        CrossSellProduct.objects.create(product1=self.a, product2=self.d)
        CrossSellProduct.objects.create(product1=self.b, product2=self.a)
        CrossSellProduct.objects.create(product1=self.b, product2=self.c)

    def test_excludes_requested_and_hidden_products(self):
        products = get_cross_sell_products_by_product_ids([self.a.id, self.b.id], 10)

        self.assertEqual(products, [self.c])

    def test_include_hidden(self):
        products = get_cross_sell_products_by_product_ids([self.a.id], 10, include_hidden=True)

        self.assertEqual(products, [self.b, self.d])

    def test_limit(self):
        products = get_cross_sell_products_by_product_ids([self.a.id], 1, include_hidden=True)

        self.assertEqual(products, [self.b])

    def test_no_products(self):
        self.assertEqual(get_cross_sell_products_by_product_ids([], 4), [])
        self.assertEqual(get_cross_sell_products_by_product_ids([self.a.id], 0), [])
