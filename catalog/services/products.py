"""
Product Service - catalog read helpers.
"""
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from django.db.models import Q

from catalog.models import Product, ProductTag, ProductVariantAttributeCombination

# Visibilities that can be found by code without include_hidden.
SEARCHABLE_VISIBILITIES = (Product.Visibility.FULL, Product.Visibility.SEARCH_RESULTS)


def _code_filter(code: str, prefix: str = '') -> Q:
    return (
        Q(**{f'{prefix}sku': code})
        | Q(**{f'{prefix}gtin': code})
        | Q(**{f'{prefix}manufacturer_part_number': code})
    )


def get_product_by_code(
    code: str,
    include_hidden: bool = False
) -> Tuple[Optional[Product], Optional[ProductVariantAttributeCombination]]:
    """
    Find a product by SKU, GTIN or manufacturer part number.

    Products are searched first, then attribute combinations. Without
    ``include_hidden`` only published products visible in search results
    qualify.

    Returns:
        ``(product, None)`` for a product match, ``(product, combination)``
        for a combination match, ``(None, None)`` otherwise
    """
    code = (code or '').strip()
    if not code:
        return None, None

    products = Product.objects.filter(_code_filter(code))
    if not include_hidden:
        products = products.filter(published=True, visibility__in=SEARCHABLE_VISIBILITIES)

    product = products.order_by('id').first()
    if product is not None:
        return product, None

    combinations = ProductVariantAttributeCombination.objects.select_related('product').filter(
        _code_filter(code),
        product__deleted=False
    )
    if not include_hidden:
        combinations = combinations.filter(
            is_active=True,
            product__published=True,
            product__visibility__in=SEARCHABLE_VISIBILITIES
        )

    combination = combinations.order_by('id').first()
    if combination is None:
        return None, None
    return combination.product, combination


def get_product_tags_by_product_ids(
    product_ids: Iterable[int],
    include_hidden: bool = False
) -> Dict[int, List[ProductTag]]:
    """
    Map product IDs to their tags. Without ``include_hidden`` only published
    tags of published, fully visible products are returned.
    """
    product_ids = list(product_ids)
    tag_map: Dict[int, List[ProductTag]] = defaultdict(list)
    if not product_ids:
        return tag_map

    through = Product.tags.through.objects.select_related('producttag').filter(
        product_id__in=product_ids,
        product__deleted=False
    )
    if not include_hidden:
        through = through.filter(
            product__published=True,
            product__visibility=Product.Visibility.FULL,
            producttag__published=True
        )

    for row in through.order_by('product_id', 'producttag__name'):
        tag_map[row.product_id].append(row.producttag)

    return tag_map


def apply_product_review_totals(product: Product) -> Product:
    """
    Recompute the approved / not approved rating sums and review counts of
    ``product`` from its reviews. The product is not saved.
    """
    approved_rating_sum = 0
    not_approved_rating_sum = 0
    approved_total_reviews = 0
    not_approved_total_reviews = 0

    for review in product.reviews.all():
        if review.is_approved:
            approved_rating_sum += review.rating
            approved_total_reviews += 1
        else:
            not_approved_rating_sum += review.rating
            not_approved_total_reviews += 1

    product.approved_rating_sum = approved_rating_sum
    product.not_approved_rating_sum = not_approved_rating_sum
    product.approved_total_reviews = approved_total_reviews
    product.not_approved_total_reviews = not_approved_total_reviews
    return product
