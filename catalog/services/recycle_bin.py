"""
Recycle Bin Service - restore or permanently delete soft-deleted products.

Restore brings back a product together with what it depends on:
    - soft-deleted manufacturers assigned to it
    - its categories and all their ancestors
    - its required products and, for bundles, soft-deleted components
      (restored through the same procedure)

Permanent delete severs references the database would reject, removes rows
without a cascade, then deletes the product. Products referenced by an order
line are never deleted.

Each root product of a batch is processed in its own savepoint. A failure is
logged and reported and the batch continues with the next product; argument
and precondition errors are raised to the caller.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from django.db import transaction

from catalog.cache import invalidate_product_tag_cache
from catalog.exceptions import CatalogPreconditionError
from catalog.models import (
    Category,
    Manufacturer,
    Product,
    ProductBundleItem,
    ProductCategory,
    ProductManufacturer,
    ProductReviewHelpfulness,
)
from orders.models import OrderItem, ShoppingCartItem

logger = logging.getLogger(__name__)


@dataclass
class ItemFailure:
    product_id: int
    reason: str


@dataclass
class RecycleBinReport:
    """Outcome of a batch restore or permanent delete, per root product."""
    succeeded: List[int] = field(default_factory=list)
    failed: List[ItemFailure] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    def as_dict(self) -> Dict:
        return {
            'success_count': self.success_count,
            'succeeded': self.succeeded,
            'failed': [{'product_id': f.product_id, 'reason': f.reason} for f in self.failed],
            'skipped': self.skipped,
        }


def _normalize_ids(product_ids: Optional[Iterable[int]]) -> List[int]:
    return list(dict.fromkeys(int(pk) for pk in (product_ids or [])))


def _get_deleted_products(product_ids: Iterable[int]):
    return Product.all_objects.filter(id__in=list(product_ids), deleted=True).order_by('id')


def _require_deleted(product: Product) -> None:
    if product is None:
        raise CatalogPreconditionError("Product is required")
    if not product.deleted:
        raise CatalogPreconditionError(f"Product #{product.id} is not deleted")


# =============================================================================
# Restore
# =============================================================================

def _collect_category_ids(product: Product, category_parents: Dict[int, Optional[int]]) -> Set[int]:
    """Assigned categories of ``product`` plus all of their ancestors."""
    category_ids: Set[int] = set()
    stack = list(
        ProductCategory.objects.filter(product_id=product.id).values_list('category_id', flat=True)
    )

    while stack:
        category_id = stack.pop()
        if category_id in category_ids:
            continue
        category_ids.add(category_id)

        parent_id = category_parents.get(category_id)
        if parent_id is not None and parent_id not in category_ids:
            stack.append(parent_id)

    return category_ids


def _collect_dependent_product_ids(product: Product) -> List[int]:
    product_ids = product.parse_required_product_ids()

    if product.is_bundle:
        product_ids.extend(
            ProductBundleItem.objects.filter(
                bundle_product_id=product.id,
                product__deleted=True
            ).values_list('product_id', flat=True)
        )

    return list(dict.fromkeys(pk for pk in product_ids if pk != product.id))


def restore_product(product: Product, visited: Optional[Set[int]] = None) -> List[int]:
    """
    Restore a soft-deleted product and everything it depends on.

    Dependent products are processed from a worklist; products already in
    ``visited`` are skipped, so mutual requirements terminate. Every product
    is restored and saved before its dependents.

    Args:
        product: Soft-deleted product
        visited: IDs already handled in the current batch; updated in place

    Returns:
        IDs of all products restored, ``product`` first

    Raises:
        CatalogPreconditionError: If product is missing or not deleted
    """
    _require_deleted(product)

    if visited is None:
        visited = set()

    # id -> parent id of every category, deleted ones included
    category_parents = dict(Category.all_objects.values_list('id', 'parent_id'))

    restored = []
    worklist = [product]

    while worklist:
        current = worklist.pop(0)
        if current.id in visited:
            continue
        visited.add(current.id)

        manufacturer_ids = list(
            ProductManufacturer.objects.filter(
                product_id=current.id,
                manufacturer__deleted=True
            ).values_list('manufacturer_id', flat=True)
        )
        category_ids = _collect_category_ids(current, category_parents)
        dependent_ids = _collect_dependent_product_ids(current)

        # The product first, so that dependents referencing it are accepted.
        current.deleted = False
        current.save(update_fields=['deleted', 'updated_at'])
        restored.append(current.id)

        if manufacturer_ids:
            Manufacturer.all_objects.filter(id__in=manufacturer_ids).update(deleted=False)

        if category_ids:
            Category.all_objects.filter(id__in=category_ids, deleted=True).update(deleted=False)

        pending_ids = [pk for pk in dependent_ids if pk not in visited]
        if pending_ids:
            worklist.extend(_get_deleted_products(pending_ids))

        logger.debug(
            f"Restored product #{current.id}: {len(manufacturer_ids)} manufacturers, "
            f"{len(category_ids)} categories checked, {len(pending_ids)} dependent products"
        )

    return restored


def restore_products(product_ids: Iterable[int]) -> RecycleBinReport:
    """
    Restore soft-deleted products.

    IDs of products that are not deleted are ignored. The product tag cache
    is cleared once if at least one product was restored.
    """
    report = RecycleBinReport()
    product_ids = _normalize_ids(product_ids)
    if not product_ids:
        return report

    visited: Set[int] = set()

    for product in _get_deleted_products(product_ids):
        product_id = product.id
        if product_id in visited:
            # Already restored as a dependency of an earlier product.
            report.succeeded.append(product_id)
            continue

        visited_before = set(visited)
        try:
            with transaction.atomic():
                restore_product(product, visited=visited)
        except CatalogPreconditionError:
            raise
        except Exception as e:
            # Rolled back, so nothing of this root counts as handled.
            visited.intersection_update(visited_before)
            logger.exception(f"Failed to restore product #{product_id}: {e}")
            report.failed.append(ItemFailure(product_id, str(e)))
        else:
            report.succeeded.append(product_id)

    if report.success_count > 0:
        invalidate_product_tag_cache()

    logger.info(
        f"Restored {report.success_count} of {len(product_ids)} products, "
        f"{len(report.failed)} failed"
    )
    return report


# =============================================================================
# Permanent delete
# =============================================================================

def delete_product_permanent(product: Product) -> None:
    """
    Permanently delete a soft-deleted product.

    Raises:
        CatalogPreconditionError: If product is missing or not deleted
        django.db.models.ProtectedError: If an order line references it
    """
    _require_deleted(product)

    product.delivery_time = None
    product.quantity_unit = None
    product.sample_download = None
    product.country_of_origin = None
    product.compare_price_label = None
    product.main_picture = None
    product.save(update_fields=[
        'delivery_time', 'quantity_unit', 'sample_download',
        'country_of_origin', 'compare_price_label', 'main_picture', 'updated_at'
    ])

    if product.is_grouped:
        Product.all_objects.filter(parent_grouped_product_id=product.id).update(parent_grouped_product=None)
    elif product.is_bundle:
        bundle_item_ids = list(product.bundle_items.values_list('id', flat=True))
        if bundle_item_ids:
            ShoppingCartItem.objects.filter(bundle_item_id__in=bundle_item_ids).delete()

    # Cart lines of other bundles in which this product is a component.
    component_item_ids = list(
        ProductBundleItem.objects.filter(product_id=product.id).values_list('id', flat=True)
    )
    if component_item_ids:
        ShoppingCartItem.objects.filter(bundle_item_id__in=component_item_ids).delete()

    review_ids = list(product.reviews.values_list('id', flat=True))
    if review_ids:
        ProductReviewHelpfulness.objects.filter(review_id__in=review_ids).delete()

    product_id = product.id
    product.delete()
    logger.debug(f"Permanently deleted product #{product_id}")


def delete_products_permanent(product_ids: Iterable[int]) -> RecycleBinReport:
    """
    Permanently delete soft-deleted products.

    Products referenced by any order line are excluded up front and reported
    as skipped. IDs of products that are not deleted are ignored.
    """
    report = RecycleBinReport()
    product_ids = _normalize_ids(product_ids)
    if not product_ids:
        return report

    excluded_ids = set(
        OrderItem.objects.filter(product_id__in=product_ids).values_list('product_id', flat=True).distinct()
    )
    if excluded_ids:
        report.skipped = sorted(excluded_ids)
        product_ids = [pk for pk in product_ids if pk not in excluded_ids]
        logger.info(f"Skipping ordered products: {report.skipped}")

    for product in _get_deleted_products(product_ids):
        product_id = product.id
        try:
            with transaction.atomic():
                delete_product_permanent(product)
        except CatalogPreconditionError:
            raise
        except Exception as e:
            logger.exception(f"Failed to permanently delete product #{product_id}: {e}")
            report.failed.append(ItemFailure(product_id, str(e)))
        else:
            report.succeeded.append(product_id)

    logger.info(
        f"Permanently deleted {report.success_count} products, "
        f"{len(report.skipped)} skipped, {len(report.failed)} failed"
    )
    return report
