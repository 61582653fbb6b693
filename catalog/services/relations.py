"""
Relation Service - related and cross-sell recommendation graphs.

``complete_mutual_relations`` turns the recommendations reachable from a seed
product into a fully symmetric cluster: afterwards every product of the
cluster recommends every other one. Existing edges are never removed or
reordered.
"""
import enum
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Set, Type

from django.db import models, transaction
from django.db.models import Max

from catalog.models import CrossSellProduct, Product, RelatedProduct

logger = logging.getLogger(__name__)


class RelationKind(enum.Enum):
    RELATED = 'related'
    CROSS_SELL = 'cross_sell'

    @property
    def model(self) -> Type[models.Model]:
        return RelatedProduct if self is RelationKind.RELATED else CrossSellProduct

    @property
    def is_ordered(self) -> bool:
        return self is RelationKind.RELATED


def _collect_cluster(seed_id: int, kind: RelationKind) -> List[int]:
    """
    Breadth-first walk over the forward edges starting at ``seed_id``.

    Only products that are not soft-deleted are followed. The seed is part of
    the cluster as soon as it has at least one visible target.
    """
    edge_model = kind.model
    ordering = ('product1_id', 'display_order', 'id') if kind.is_ordered else ('product1_id', 'id')

    cluster: List[int] = []
    seen: Set[int] = {seed_id}
    frontier = [seed_id]

    while frontier:
        targets = edge_model.objects.filter(
            product1_id__in=frontier,
            product2__deleted=False
        ).order_by(*ordering).values_list('product2_id', flat=True)

        next_frontier = []
        for target_id in targets:
            if target_id not in seen:
                seen.add(target_id)
                cluster.append(target_id)
                next_frontier.append(target_id)
        frontier = next_frontier

    if cluster:
        cluster.append(seed_id)
    return cluster


@transaction.atomic
def complete_mutual_relations(product_id: int, kind: RelationKind) -> int:
    """
    Create the missing edges between all products of the seed's cluster.

    Related edges are appended to the end of each source product's list:
    ``display_order`` starts at the source's current maximum plus one and
    increases by one per new edge.

    Returns:
        Number of edges created (0 when the cluster is already complete or
        has fewer than two members)
    """
    cluster = _collect_cluster(product_id, kind)
    if len(cluster) <= 1:
        return 0

    edge_model = kind.model

    # target -> ids of products already pointing at it
    associated_ids_map: Dict[int, Set[int]] = defaultdict(set)
    for source_id, target_id in edge_model.objects.filter(
        product2_id__in=cluster
    ).values_list('product1_id', 'product2_id'):
        associated_ids_map[target_id].add(source_id)

    display_orders: Optional[Dict[int, int]] = None
    if kind.is_ordered:
        display_orders = {
            row['product1_id']: row['max_order'] or 0
            for row in RelatedProduct.objects.filter(
                product1_id__in=cluster
            ).values('product1_id').annotate(max_order=Max('display_order'))
        }

    new_edges = []
    for target_id in cluster:
        associated_ids = associated_ids_map.get(target_id, set())

        for source_id in cluster:
            if source_id == target_id or source_id in associated_ids:
                continue

            if display_orders is not None:
                display_orders[source_id] = display_orders.get(source_id, 0) + 1
                new_edges.append(RelatedProduct(
                    product1_id=source_id,
                    product2_id=target_id,
                    display_order=display_orders[source_id]
                ))
            else:
                new_edges.append(CrossSellProduct(product1_id=source_id, product2_id=target_id))

    if new_edges:
        edge_model.objects.bulk_create(new_edges)
        logger.info(
            f"Completed {kind.value} cluster of product #{product_id}: "
            f"{len(cluster)} products, {len(new_edges)} edges created"
        )

    return len(new_edges)


def ensure_mutually_related_products(product_id: int) -> int:
    return complete_mutual_relations(product_id, RelationKind.RELATED)


def ensure_mutually_cross_sell_products(product_id: int) -> int:
    return complete_mutual_relations(product_id, RelationKind.CROSS_SELL)


def get_cross_sell_products_by_product_ids(
    product_ids: List[int],
    number_of_products: int,
    include_hidden: bool = False
) -> List[Product]:
    """
    Cross-sell products of the given products, excluding the products
    themselves, in edge creation order and limited to ``number_of_products``.
    """
    if not product_ids or number_of_products <= 0:
        return []

    edges = CrossSellProduct.objects.filter(product1_id__in=product_ids)
    if not include_hidden:
        edges = edges.filter(product2__published=True, product2__deleted=False)

    exclude = set(product_ids)
    target_ids = []
    for target_id in edges.order_by('id').values_list('product2_id', flat=True):
        if target_id not in exclude and target_id not in target_ids:
            target_ids.append(target_id)
            if len(target_ids) >= number_of_products:
                break

    products = Product.objects.in_bulk(target_ids)
    return [products[pk] for pk in target_ids if pk in products]
