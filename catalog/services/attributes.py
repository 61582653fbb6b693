"""
Attribute materialization - resolves decoded selections against the database.
"""
from typing import List, Optional

from catalog.attributes import AttributeSelection
from catalog.models import ProductVariantAttributeCombination, ProductVariantAttributeValue


def materialize_attribute_values(selection: AttributeSelection) -> List[ProductVariantAttributeValue]:
    """
    Load the attribute values referenced by a selection.

    A value is only returned if it belongs to the variant attribute it was
    selected for. Unknown IDs are ignored.
    """
    if not selection:
        return []

    candidates = ProductVariantAttributeValue.objects.filter(
        id__in=selection.value_ids,
        variant_attribute_id__in=selection.attribute_ids
    ).order_by('variant_attribute_id', 'display_order', 'id')

    return [
        value for value in candidates
        if value.id in selection.get_value_ids(value.variant_attribute_id)
    ]


def find_attribute_combination(
    product_id: int,
    selection: AttributeSelection
) -> Optional[ProductVariantAttributeCombination]:
    """Find the combination of ``product_id`` matching ``selection``, if any."""
    if not selection:
        return None

    return ProductVariantAttributeCombination.objects.filter(
        product_id=product_id,
        attributes_key=selection.as_key()
    ).order_by('id').first()
