"""
Helpers for building catalog fixtures in tests.
"""
from catalog.models import (
    Product,
    ProductAttribute,
    ProductVariantAttribute,
    ProductVariantAttributeValue,
)


def create_product(name='Product', **kwargs):
    return Product.objects.create(name=name, **kwargs)


def create_stock_product(name='Stock Product', stock_quantity=10, **kwargs):
    kwargs.setdefault('manage_inventory_method', Product.ManageInventoryMethod.MANAGE_STOCK)
    kwargs.setdefault('notify_admin_for_quantity_below', 0)
    return create_product(name=name, stock_quantity=stock_quantity, **kwargs)


def create_variant_attribute(product, name='Color', values=('Red', 'Blue')):
    """Attach an attribute with simple values to ``product``."""
    attribute = ProductAttribute.objects.create(name=name)
    variant_attribute = ProductVariantAttribute.objects.create(product=product, attribute=attribute)
    created = [
        ProductVariantAttributeValue.objects.create(variant_attribute=variant_attribute, name=value)
        for value in values
    ]
    return variant_attribute, created


def create_linkage_value(variant_attribute, linked_product, quantity=1, name=None):
    return ProductVariantAttributeValue.objects.create(
        variant_attribute=variant_attribute,
        name=name or f'Linked {linked_product.name}',
        value_type=ProductVariantAttributeValue.ValueType.PRODUCT_LINKAGE,
        linked_product=linked_product,
        quantity=quantity
    )
