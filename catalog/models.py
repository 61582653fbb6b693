"""
Catalog Models - Core data entities for the storefront catalog.

Models:
    - Category, Manufacturer: soft-deletable product groupings
    - Product: sellable item (simple, grouped or bundled)
    - ProductVariantAttribute / Value / Combination: attribute variants
    - ProductBundleItem: component of a bundled product
    - RelatedProduct, CrossSellProduct: recommendation edges
    - ProductReview, ProductReviewHelpfulness, ProductTag
    - Lookup entities referenced by products (delivery time, quantity unit, ...)

Soft-deletable models expose two managers: ``objects`` hides deleted rows,
``all_objects`` returns everything and is used by the recycle bin.
"""
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from .attributes import AttributeSelection


class SoftDeleteQuerySet(models.QuerySet):
    def deleted(self):
        return self.filter(deleted=True)


class SoftDeleteManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    """Default manager that hides soft-deleted rows."""

    def get_queryset(self):
        return super().get_queryset().filter(deleted=False)


class AllObjectsManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    pass


# =============================================================================
# Lookup entities
# =============================================================================

class DeliveryTime(models.Model):
    name = models.CharField(max_length=100)
    display_order = models.IntegerField(default=0)

    def __str__(self):
        return self.name


class QuantityUnit(models.Model):
    name = models.CharField(max_length=50)
    name_plural = models.CharField(max_length=50, blank=True, default='')

    def __str__(self):
        return self.name


class Country(models.Model):
    name = models.CharField(max_length=100)
    two_letter_iso_code = models.CharField(max_length=2, unique=True)

    class Meta:
        verbose_name_plural = 'Countries'

    def __str__(self):
        return self.name


class PriceLabel(models.Model):
    short_name = models.CharField(max_length=16)
    name = models.CharField(max_length=50, blank=True, default='')

    def __str__(self):
        return self.short_name


class Download(models.Model):
    file_name = models.CharField(max_length=255)
    content_type = models.CharField(max_length=100, blank=True, default='')

    def __str__(self):
        return self.file_name


class MediaFile(models.Model):
    name = models.CharField(max_length=255)
    mime_type = models.CharField(max_length=100, blank=True, default='')

    def __str__(self):
        return self.name


# =============================================================================
# Groupings
# =============================================================================

class Category(models.Model):
    """
    Product category. Categories form a tree through ``parent``.
    """
    name = models.CharField(max_length=200, db_index=True)
    parent = models.ForeignKey(
        'self',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='children',
        help_text="Parent category, empty for root categories"
    )
    published = models.BooleanField(default=True)
    deleted = models.BooleanField(default=False, db_index=True)
    display_order = models.IntegerField(default=0)

    objects = SoftDeleteManager()
    all_objects = AllObjectsManager()

    class Meta:
        verbose_name = 'Category'
        verbose_name_plural = 'Categories'
        ordering = ['display_order', 'name']
        base_manager_name = 'all_objects'

    def __str__(self):
        return self.name


class Manufacturer(models.Model):
    name = models.CharField(max_length=200, db_index=True)
    published = models.BooleanField(default=True)
    deleted = models.BooleanField(default=False, db_index=True)
    display_order = models.IntegerField(default=0)

    objects = SoftDeleteManager()
    all_objects = AllObjectsManager()

    class Meta:
        ordering = ['display_order', 'name']
        base_manager_name = 'all_objects'

    def __str__(self):
        return self.name


class ProductTag(models.Model):
    name = models.CharField(max_length=100, unique=True)
    published = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


# =============================================================================
# Product
# =============================================================================

class Product(models.Model):
    """
    Product entity. Carries its own stock counter and the flags derived from
    it by the low stock rules (published, buy and wishlist button state).
    """

    class ProductType(models.TextChoices):
        SIMPLE = 'simple', 'Simple product'
        GROUPED = 'grouped', 'Grouped product'
        BUNDLED = 'bundled', 'Bundled product'

    class Visibility(models.TextChoices):
        FULL = 'full', 'Full'
        SEARCH_RESULTS = 'search_results', 'Search results only'
        PRODUCT_PAGE = 'product_page', 'Product page only'
        HIDDEN = 'hidden', 'Hidden'

    class ManageInventoryMethod(models.TextChoices):
        DONT_MANAGE_STOCK = 'dont_manage_stock', "Don't track inventory"
        MANAGE_STOCK = 'manage_stock', 'Track inventory'
        MANAGE_STOCK_BY_ATTRIBUTES = 'manage_stock_by_attributes', 'Track inventory by attributes'

    class LowStockActivity(models.TextChoices):
        NOTHING = 'nothing', 'Nothing'
        DISABLE_BUY_BUTTON = 'disable_buy_button', 'Disable buy button'
        UNPUBLISH = 'unpublish', 'Unpublish'

    name = models.CharField(max_length=400, db_index=True)
    sku = models.CharField(max_length=400, blank=True, default='', db_index=True)
    gtin = models.CharField(max_length=400, blank=True, default='', db_index=True)
    manufacturer_part_number = models.CharField(max_length=400, blank=True, default='')
    description = models.TextField(blank=True, default='')
    price = models.DecimalField(
        max_digits=18,
        decimal_places=4,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))]
    )

    product_type = models.CharField(
        max_length=20,
        choices=ProductType.choices,
        default=ProductType.SIMPLE
    )
    parent_grouped_product = models.ForeignKey(
        'self',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='associated_products',
        help_text="Grouped product this product belongs to"
    )
    visibility = models.CharField(
        max_length=20,
        choices=Visibility.choices,
        default=Visibility.FULL
    )

    # Inventory
    manage_inventory_method = models.CharField(
        max_length=32,
        choices=ManageInventoryMethod.choices,
        default=ManageInventoryMethod.DONT_MANAGE_STOCK
    )
    stock_quantity = models.IntegerField(default=0)
    min_stock_quantity = models.IntegerField(default=0)
    notify_admin_for_quantity_below = models.IntegerField(default=1)
    low_stock_activity = models.CharField(
        max_length=32,
        choices=LowStockActivity.choices,
        default=LowStockActivity.NOTHING
    )

    # Flags derived by the low stock rules
    published = models.BooleanField(default=True, db_index=True)
    disable_buy_button = models.BooleanField(default=False)
    disable_wishlist_button = models.BooleanField(default=False)

    # Bundles and dependencies
    bundle_per_item_shopping_cart = models.BooleanField(
        default=False,
        help_text="Bundle items are put into the cart individually"
    )
    required_product_ids = models.CharField(
        max_length=1000,
        blank=True,
        default='',
        help_text="Comma separated IDs of products required by this product"
    )

    deleted = models.BooleanField(default=False, db_index=True)

    # Nullable references severed before a permanent delete
    delivery_time = models.ForeignKey(DeliveryTime, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    quantity_unit = models.ForeignKey(QuantityUnit, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    sample_download = models.ForeignKey(Download, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    country_of_origin = models.ForeignKey(Country, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    compare_price_label = models.ForeignKey(PriceLabel, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    main_picture = models.ForeignKey(MediaFile, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')

    # Review totals
    approved_rating_sum = models.IntegerField(default=0)
    not_approved_rating_sum = models.IntegerField(default=0)
    approved_total_reviews = models.IntegerField(default=0)
    not_approved_total_reviews = models.IntegerField(default=0)

    categories = models.ManyToManyField(Category, through='ProductCategory', related_name='products')
    manufacturers = models.ManyToManyField(Manufacturer, through='ProductManufacturer', related_name='products')
    tags = models.ManyToManyField(ProductTag, blank=True, related_name='products')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = SoftDeleteManager()
    all_objects = AllObjectsManager()

    class Meta:
        verbose_name = 'Product'
        verbose_name_plural = 'Products'
        ordering = ['name']
        base_manager_name = 'all_objects'
        indexes = [
            models.Index(fields=['deleted', 'published']),
            models.Index(fields=['product_type', 'deleted']),
        ]

    def __str__(self):
        return self.name

    @property
    def is_bundle(self) -> bool:
        return self.product_type == self.ProductType.BUNDLED

    @property
    def is_grouped(self) -> bool:
        return self.product_type == self.ProductType.GROUPED

    def parse_required_product_ids(self):
        """
        Return the IDs listed in ``required_product_ids``.

        Blank and non-numeric entries are ignored.
        """
        ids = []
        for part in (self.required_product_ids or '').split(','):
            part = part.strip()
            if part.isdigit():
                ids.append(int(part))
        return ids


class ProductCategory(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='product_categories')
    category = models.ForeignKey(Category, on_delete=models.CASCADE, related_name='product_categories')
    display_order = models.IntegerField(default=0)

    class Meta:
        ordering = ['display_order']
        constraints = [
            models.UniqueConstraint(fields=['product', 'category'], name='unique_product_category')
        ]


class ProductManufacturer(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='product_manufacturers')
    manufacturer = models.ForeignKey(Manufacturer, on_delete=models.CASCADE, related_name='product_manufacturers')
    display_order = models.IntegerField(default=0)

    class Meta:
        ordering = ['display_order']
        constraints = [
            models.UniqueConstraint(fields=['product', 'manufacturer'], name='unique_product_manufacturer')
        ]


# =============================================================================
# Attributes
# =============================================================================

class ProductAttribute(models.Model):
    name = models.CharField(max_length=400)

    def __str__(self):
        return self.name


class ProductVariantAttribute(models.Model):
    """An attribute attached to a product, e.g. the product's "Color"."""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='variant_attributes')
    attribute = models.ForeignKey(ProductAttribute, on_delete=models.CASCADE, related_name='+')
    is_required = models.BooleanField(default=False)
    display_order = models.IntegerField(default=0)

    class Meta:
        ordering = ['display_order']

    def __str__(self):
        return f"{self.product_id}: {self.attribute}"


class ProductVariantAttributeValue(models.Model):
    """
    A selectable value of a variant attribute. Values of type
    ``product_linkage`` point to another product whose stock moves together
    with the host product, scaled by ``quantity``.
    """

    class ValueType(models.TextChoices):
        SIMPLE = 'simple', 'Simple'
        PRODUCT_LINKAGE = 'product_linkage', 'Product linkage'

    variant_attribute = models.ForeignKey(
        ProductVariantAttribute,
        on_delete=models.CASCADE,
        related_name='values'
    )
    name = models.CharField(max_length=400)
    value_type = models.CharField(max_length=20, choices=ValueType.choices, default=ValueType.SIMPLE)
    linked_product = models.ForeignKey(
        Product,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='+'
    )
    quantity = models.IntegerField(default=1, validators=[MinValueValidator(1)])
    display_order = models.IntegerField(default=0)

    class Meta:
        ordering = ['display_order']

    def __str__(self):
        return self.name


class ProductVariantAttributeCombination(models.Model):
    """
    A concrete variant of a product. Its stock counter is independent of the
    product's counter and is used with ``manage_stock_by_attributes``.
    """
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='attribute_combinations')
    raw_attributes = models.JSONField(default=dict)
    attributes_key = models.CharField(max_length=1000, db_index=True, editable=False)
    sku = models.CharField(max_length=400, blank=True, default='', db_index=True)
    gtin = models.CharField(max_length=400, blank=True, default='')
    manufacturer_part_number = models.CharField(max_length=400, blank=True, default='')
    stock_quantity = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        indexes = [
            models.Index(fields=['product', 'attributes_key']),
        ]

    def __str__(self):
        return f"{self.product_id} [{self.attributes_key}]"

    def save(self, *args, **kwargs):
        self.attributes_key = AttributeSelection.from_raw(self.raw_attributes).as_key()
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'raw_attributes' in update_fields:
            kwargs['update_fields'] = set(update_fields) | {'attributes_key'}
        super().save(*args, **kwargs)


# =============================================================================
# Bundles
# =============================================================================

class ProductBundleItem(models.Model):
    bundle_product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='bundle_items')
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='bundle_item_references')
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    display_order = models.IntegerField(default=0)

    class Meta:
        ordering = ['display_order']

    def __str__(self):
        return f"{self.quantity}x {self.product_id} in {self.bundle_product_id}"


# =============================================================================
# Recommendation edges
# =============================================================================

class RelatedProduct(models.Model):
    """Directed "product1 recommends product2" edge, ordered per product1."""
    product1 = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='related_products')
    product2 = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='+')
    display_order = models.IntegerField(default=0)

    class Meta:
        ordering = ['product1', 'display_order']
        constraints = [
            models.UniqueConstraint(fields=['product1', 'product2'], name='unique_related_product')
        ]

    def __str__(self):
        return f"{self.product1_id} -> {self.product2_id} ({self.display_order})"


class CrossSellProduct(models.Model):
    product1 = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='cross_sell_products')
    product2 = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='+')

    class Meta:
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(fields=['product1', 'product2'], name='unique_cross_sell_product')
        ]

    def __str__(self):
        return f"{self.product1_id} -> {self.product2_id}"


# =============================================================================
# Reviews
# =============================================================================

class ProductReview(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='reviews')
    title = models.CharField(max_length=200, blank=True, default='')
    text = models.TextField(blank=True, default='')
    rating = models.PositiveSmallIntegerField(default=5)
    is_approved = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.product_id}: {self.rating}"


class ProductReviewHelpfulness(models.Model):
    # No cascade: rows must be removed before their review.
    review = models.ForeignKey(
        ProductReview,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name='helpfulness_entries'
    )
    was_helpful = models.BooleanField(default=True)

    class Meta:
        verbose_name_plural = 'Product review helpfulness'


class RecycleBinProduct(Product):
    """Soft-deleted products, as managed by the recycle bin admin."""

    class Meta:
        proxy = True
        verbose_name = 'Deleted product'
        verbose_name_plural = 'Recycle bin'
