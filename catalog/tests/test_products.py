"""
Tests for catalog read helpers and the product tag cache.
"""
from unittest.mock import MagicMock, patch

import redis
from django.test import TestCase

from catalog import cache
from catalog.models import Product, ProductReview, ProductTag, ProductVariantAttributeCombination
from catalog.services import (
    apply_product_review_totals,
    get_product_by_code,
    get_product_tags_by_product_ids,
)

from .utils import create_product


class ProductByCodeTestCase(TestCase):

    def setUp(self):
        self.product = create_product('Lamp', sku='LMP-1', gtin='4001234567890')
        self.combination = ProductVariantAttributeCombination.objects.create(
            product=self.product,
            sku='LMP-1-RED'
        )

    def test_finds_product_by_sku_and_gtin(self):
        self.assertEqual(get_product_by_code('LMP-1'), (self.product, None))
        self.assertEqual(get_product_by_code(' 4001234567890 '), (self.product, None))

    def test_finds_combination(self):
        self.assertEqual(get_product_by_code('LMP-1-RED'), (self.product, self.combination))

    def test_hidden_products(self):
        self.product.visibility = Product.Visibility.HIDDEN
        self.product.save()

        self.assertEqual(get_product_by_code('LMP-1'), (None, None))
        self.assertEqual(get_product_by_code('LMP-1-RED'), (None, None))
        self.assertEqual(get_product_by_code('LMP-1', include_hidden=True), (self.product, None))

    def test_deleted_products_are_never_found(self):
        self.product.deleted = True
        self.product.save()

        self.assertEqual(get_product_by_code('LMP-1', include_hidden=True), (None, None))
        self.assertEqual(get_product_by_code('LMP-1-RED', include_hidden=True), (None, None))

    def test_blank_code(self):
        self.assertEqual(get_product_by_code('  '), (None, None))
        self.assertEqual(get_product_by_code(None), (None, None))


class ProductTagsTestCase(TestCase):

    def test_tags_by_product_ids(self):
        garden = ProductTag.objects.create(name='garden')
        internal = ProductTag.objects.create(name='internal', published=False)
        visible = create_product('Spade')
        page_only = create_product('Hoe', visibility=Product.Visibility.PRODUCT_PAGE)
        visible.tags.add(garden, internal)
        page_only.tags.add(garden)

        tags = get_product_tags_by_product_ids([visible.id, page_only.id])
        self.assertEqual(dict(tags), {visible.id: [garden]})

        all_tags = get_product_tags_by_product_ids([visible.id, page_only.id], include_hidden=True)
        self.assertEqual(all_tags[visible.id], [garden, internal])
        self.assertEqual(all_tags[page_only.id], [garden])

    def test_no_ids(self):
        self.assertEqual(dict(get_product_tags_by_product_ids([])), {})


class ReviewTotalsTestCase(TestCase):

    def test_apply_totals(self):
        product = create_product('Lamp')
        ProductReview.objects.create(product=product, rating=5, is_approved=True)
        ProductReview.objects.create(product=product, rating=3, is_approved=True)
        ProductReview.objects.create(product=product, rating=1, is_approved=False)

        apply_product_review_totals(product)

        self.assertEqual(product.approved_rating_sum, 8)
        self.assertEqual(product.approved_total_reviews, 2)
        self.assertEqual(product.not_approved_rating_sum, 1)
        self.assertEqual(product.not_approved_total_reviews, 1)


class ProductTagCacheTestCase(TestCase):

    def setUp(self):
        self.tag = ProductTag.objects.create(name='garden')
        create_product('Spade').tags.add(self.tag)

    @patch('catalog.cache.get_redis_client', return_value=None)
    def test_without_redis(self, get_client):
        self.assertEqual(cache.get_product_tag_counts(), {self.tag.id: 1})
        self.assertEqual(cache.invalidate_product_tag_cache(), 0)

    @patch('catalog.cache.get_redis_client')
    def test_cached_value_is_used(self, get_client):
        client = MagicMock()
        client.get.return_value = '{"%d": 7}' % self.tag.id
        get_client.return_value = client

        self.assertEqual(cache.get_product_tag_counts(), {self.tag.id: 7})
        client.set.assert_not_called()

    @patch('catalog.cache.get_redis_client')
    def test_computed_value_is_stored(self, get_client):
        client = MagicMock()
        client.get.return_value = None
        get_client.return_value = client

        self.assertEqual(cache.get_product_tag_counts(), {self.tag.id: 1})
        key, payload = client.set.call_args[0]
        self.assertEqual(key, 'catalog:producttag:counts:0')
        self.assertEqual(payload, '{"%d": 1}' % self.tag.id)

    @patch('catalog.cache.get_redis_client')
    def test_redis_errors_fail_open(self, get_client):
        client = MagicMock()
        client.get.side_effect = redis.ConnectionError('down')
        client.set.side_effect = redis.ConnectionError('down')
        client.scan_iter.side_effect = redis.ConnectionError('down')
        get_client.return_value = client

        self.assertEqual(cache.get_product_tag_counts(), {self.tag.id: 1})
        self.assertEqual(cache.invalidate_product_tag_cache(), 0)

    @patch('catalog.cache.get_redis_client')
    def test_invalidate_removes_tag_keys(self, get_client):
        client = MagicMock()
        client.scan_iter.return_value = iter(['catalog:producttag:counts:0', 'catalog:producttag:counts:1'])
        client.delete.return_value = 2
        get_client.return_value = client

        self.assertEqual(cache.invalidate_product_tag_cache(), 2)
        client.scan_iter.assert_called_once_with(match='catalog:producttag:*')
        client.delete.assert_called_once_with('catalog:producttag:counts:0', 'catalog:producttag:counts:1')
