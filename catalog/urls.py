"""
URL routing for catalog API endpoints.
"""
from django.urls import path

from . import views
from .services import RelationKind

app_name = 'catalog'

urlpatterns = [
    # Recycle bin
    path('recycle-bin/products/', views.RecycleBinListView.as_view(), name='recycle-bin-list'),
    path('recycle-bin/products/restore/', views.RecycleBinRestoreView.as_view(), name='recycle-bin-restore'),
    path('recycle-bin/products/delete-permanent/', views.RecycleBinDeleteView.as_view(), name='recycle-bin-delete'),

    # Products
    path('products/cross-sells/', views.CrossSellProductsView.as_view(), name='product-cross-sells'),
    path(
        'products/<int:pk>/inventory/adjust/',
        views.ProductInventoryAdjustView.as_view(),
        name='product-inventory-adjust'
    ),
    path(
        'products/<int:pk>/related/ensure-mutual/',
        views.EnsureMutualRelationsView.as_view(kind=RelationKind.RELATED),
        name='product-related-ensure-mutual'
    ),
    path(
        'products/<int:pk>/cross-sells/ensure-mutual/',
        views.EnsureMutualRelationsView.as_view(kind=RelationKind.CROSS_SELL),
        name='product-cross-sells-ensure-mutual'
    ),

    # Tags
    path('product-tags/counts/', views.ProductTagCountsView.as_view(), name='product-tag-counts'),
]
