"""
Catalog service layer.

- inventory: stock adjustment across variants, bundles and linked products
- relations: mutual related / cross-sell product graphs
- recycle_bin: restore and permanent delete of soft-deleted products
- products: catalog read helpers
"""
from .inventory import AdjustInventoryResult, adjust_inventory, adjust_order_item_inventory
from .products import apply_product_review_totals, get_product_by_code, get_product_tags_by_product_ids
from .recycle_bin import (
    RecycleBinReport,
    delete_product_permanent,
    delete_products_permanent,
    restore_product,
    restore_products,
)
from .relations import (
    RelationKind,
    complete_mutual_relations,
    ensure_mutually_cross_sell_products,
    ensure_mutually_related_products,
    get_cross_sell_products_by_product_ids,
)

__all__ = [
    'AdjustInventoryResult',
    'RecycleBinReport',
    'RelationKind',
    'adjust_inventory',
    'adjust_order_item_inventory',
    'apply_product_review_totals',
    'complete_mutual_relations',
    'delete_product_permanent',
    'delete_products_permanent',
    'ensure_mutually_cross_sell_products',
    'ensure_mutually_related_products',
    'get_cross_sell_products_by_product_ids',
    'get_product_by_code',
    'get_product_tags_by_product_ids',
    'restore_product',
    'restore_products',
]
