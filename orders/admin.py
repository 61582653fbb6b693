"""
Django Admin configuration for order models.
"""
from django.contrib import admin

from .models import Order, OrderItem, ShoppingCartItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ['product', 'quantity', 'unit_price', 'attribute_selection', 'bundle_data', 'subtotal']
    can_delete = False

    def subtotal(self, obj):
        return obj.subtotal
    subtotal.short_description = 'Subtotal'


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'status', 'total_amount', 'item_count', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['id']
    ordering = ['-created_at']
    readonly_fields = ['total_amount', 'created_at', 'updated_at']
    inlines = [OrderItemInline]

    def item_count(self, obj):
        return obj.items.count()
    item_count.short_description = 'Items'


@admin.register(ShoppingCartItem)
class ShoppingCartItemAdmin(admin.ModelAdmin):
    list_display = ['id', 'customer_id', 'product', 'bundle_item', 'quantity', 'created_at']
    search_fields = ['customer_id', 'product__name']
    raw_id_fields = ['product', 'bundle_item']
