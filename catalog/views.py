"""
Catalog API Views.

Implements:
- Recycle bin listing, restore and permanent delete
- Stock adjustment for a product
- Completion of mutual related / cross-sell product clusters
- Cross-sell listing and product tag counts
"""
import logging

from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .cache import get_product_tag_counts
from .exceptions import CatalogPreconditionError
from .models import Product
from .serializers import (
    AdjustInventoryResultSerializer,
    DeletedProductSerializer,
    InventoryAdjustmentSerializer,
    ProductIdsSerializer,
    ProductMinimalSerializer,
    RecycleBinReportSerializer,
)
from .services import (
    RelationKind,
    adjust_inventory,
    complete_mutual_relations,
    delete_products_permanent,
    get_cross_sell_products_by_product_ids,
    restore_products,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Recycle Bin Views
# =============================================================================

class RecycleBinListView(generics.ListAPIView):
    """
    GET: List soft-deleted products, most recently changed first.
    """
    serializer_class = DeletedProductSerializer

    def get_queryset(self):
        return Product.all_objects.filter(deleted=True).order_by('-updated_at', 'id')


class RecycleBinRestoreView(APIView):
    """
    POST: Restore soft-deleted products with their categories, manufacturers
    and required products.

    Request Body:
    {"product_ids": [1, 2]}
    """

    def post(self, request):
        serializer = ProductIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        report = restore_products(serializer.validated_data['product_ids'])
        return Response(RecycleBinReportSerializer(report.as_dict()).data)


class RecycleBinDeleteView(APIView):
    """
    POST: Permanently delete soft-deleted products. Ordered products are
    skipped.

    Request Body:
    {"product_ids": [1, 2]}
    """

    def post(self, request):
        serializer = ProductIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        report = delete_products_permanent(serializer.validated_data['product_ids'])
        return Response(RecycleBinReportSerializer(report.as_dict()).data)


# =============================================================================
# Product Views
# =============================================================================

class ProductInventoryAdjustView(APIView):
    """
    POST: Increase or decrease the stock of a product.

    Request Body:
    {"decrease": true, "quantity": 2, "attribute_selection": {"12": [31]}}
    """

    def post(self, request, pk):
        product = get_object_or_404(Product.objects.all(), pk=pk)

        serializer = InventoryAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = adjust_inventory(
                product,
                data.get('attribute_selection'),
                decrease=data['decrease'],
                quantity=data['quantity']
            )
        except CatalogPreconditionError as e:
            logger.warning(f"Inventory adjustment for product #{pk} rejected: {e}")
            return Response(
                {'error': 'Validation Error', 'detail': str(e)},
                status=status.HTTP_400_BAD_REQUEST
            )

        return Response(AdjustInventoryResultSerializer(result).data)


class EnsureMutualRelationsView(APIView):
    """
    POST: Make the related (or cross-sell) products of a product mutually
    related.

    Returns the number of edges created.
    """
    kind = RelationKind.RELATED

    def post(self, request, pk):
        get_object_or_404(Product.objects.all(), pk=pk)
        created = complete_mutual_relations(pk, self.kind)
        return Response({'created': created})


class CrossSellProductsView(APIView):
    """
    GET: Cross-sell products for a set of products.

    Query Parameters:
        - product_ids: Comma separated product IDs (required)
        - limit: Maximum number of products (default 4)
    """

    def get(self, request):
        raw_ids = request.query_params.get('product_ids', '')
        try:
            product_ids = [int(pk) for pk in raw_ids.split(',') if pk.strip()]
            limit = int(request.query_params.get('limit', 4))
        except ValueError:
            return Response(
                {'error': 'product_ids and limit must be integers'},
                status=status.HTTP_400_BAD_REQUEST
            )

        if not product_ids:
            return Response(
                {'error': 'product_ids is required'},
                status=status.HTTP_400_BAD_REQUEST
            )

        products = get_cross_sell_products_by_product_ids(product_ids, limit)
        return Response(ProductMinimalSerializer(products, many=True).data)


class ProductTagCountsView(APIView):
    """
    GET: Number of products per published tag. Served from the product tag
    cache when available.
    """

    def get(self, request):
        counts = get_product_tag_counts()
        return Response({str(tag_id): count for tag_id, count in counts.items()})
