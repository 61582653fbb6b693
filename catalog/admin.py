"""
Django Admin configuration for catalog models, including the recycle bin.
"""
from django.contrib import admin, messages

from .models import (
    Category,
    CrossSellProduct,
    Manufacturer,
    Product,
    ProductBundleItem,
    ProductReview,
    ProductTag,
    ProductVariantAttribute,
    ProductVariantAttributeCombination,
    ProductVariantAttributeValue,
    RecycleBinProduct,
    RelatedProduct,
)
from .services import (
    delete_products_permanent,
    ensure_mutually_cross_sell_products,
    ensure_mutually_related_products,
    restore_products,
)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'parent', 'published', 'deleted']
    list_filter = ['published', 'deleted']
    search_fields = ['name']
    raw_id_fields = ['parent']

    def get_queryset(self, request):
        return Category.all_objects.select_related('parent')


@admin.register(Manufacturer)
class ManufacturerAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'published', 'deleted']
    list_filter = ['published', 'deleted']
    search_fields = ['name']

    def get_queryset(self, request):
        return Manufacturer.all_objects.all()


class ProductBundleItemInline(admin.TabularInline):
    model = ProductBundleItem
    fk_name = 'bundle_product'
    extra = 0
    raw_id_fields = ['product']


class RelatedProductInline(admin.TabularInline):
    model = RelatedProduct
    fk_name = 'product1'
    extra = 0
    raw_id_fields = ['product2']


class CrossSellProductInline(admin.TabularInline):
    model = CrossSellProduct
    fk_name = 'product1'
    extra = 0
    raw_id_fields = ['product2']


class CombinationInline(admin.TabularInline):
    model = ProductVariantAttributeCombination
    extra = 0
    fields = ['raw_attributes', 'sku', 'stock_quantity', 'is_active']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = [
        'id', 'name', 'sku', 'product_type', 'manage_inventory_method',
        'stock_quantity', 'published', 'disable_buy_button'
    ]
    list_filter = ['product_type', 'manage_inventory_method', 'published', 'low_stock_activity']
    search_fields = ['name', 'sku', 'gtin']
    raw_id_fields = ['parent_grouped_product']
    filter_horizontal = ['tags']
    inlines = [ProductBundleItemInline, RelatedProductInline, CrossSellProductInline, CombinationInline]
    actions = ['make_mutually_related', 'make_mutually_cross_sell']

    @admin.action(description='Make related products mutually related')
    def make_mutually_related(self, request, queryset):
        created = sum(ensure_mutually_related_products(product.id) for product in queryset)
        self.message_user(request, f"{created} related product links created.")

    @admin.action(description='Make cross-sell products mutually cross-sold')
    def make_mutually_cross_sell(self, request, queryset):
        created = sum(ensure_mutually_cross_sell_products(product.id) for product in queryset)
        self.message_user(request, f"{created} cross-sell links created.")


@admin.register(RecycleBinProduct)
class RecycleBinProductAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'sku', 'product_type', 'updated_at']
    search_fields = ['name', 'sku']
    ordering = ['-updated_at']
    actions = ['restore_selected', 'delete_selected_permanently']

    def get_queryset(self, request):
        return RecycleBinProduct.all_objects.filter(deleted=True)

    def get_actions(self, request):
        actions = super().get_actions(request)
        actions.pop('delete_selected', None)
        return actions

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    @admin.action(description='Restore selected products')
    def restore_selected(self, request, queryset):
        report = restore_products(queryset.values_list('id', flat=True))
        self._report(request, report, 'restored')

    @admin.action(description='Delete selected products permanently')
    def delete_selected_permanently(self, request, queryset):
        report = delete_products_permanent(queryset.values_list('id', flat=True))
        self._report(request, report, 'deleted permanently')
        if report.skipped:
            self.message_user(
                request,
                f"{len(report.skipped)} products are referenced by orders and were kept.",
                level=messages.WARNING
            )

    def _report(self, request, report, verb):
        self.message_user(request, f"{report.success_count} products {verb}.")
        if report.failed:
            self.message_user(request, f"{len(report.failed)} products failed.", level=messages.ERROR)


class ProductVariantAttributeValueInline(admin.TabularInline):
    model = ProductVariantAttributeValue
    extra = 0
    raw_id_fields = ['linked_product']


@admin.register(ProductVariantAttribute)
class ProductVariantAttributeAdmin(admin.ModelAdmin):
    list_display = ['id', 'product', 'attribute', 'is_required']
    raw_id_fields = ['product']
    inlines = [ProductVariantAttributeValueInline]


@admin.register(ProductReview)
class ProductReviewAdmin(admin.ModelAdmin):
    list_display = ['id', 'product', 'rating', 'is_approved', 'created_at']
    list_filter = ['is_approved']
    raw_id_fields = ['product']


@admin.register(ProductTag)
class ProductTagAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'published']
    search_fields = ['name']
