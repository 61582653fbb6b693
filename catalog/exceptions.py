"""
Catalog exceptions.
"""


class CatalogError(Exception):
    """Base class for catalog errors."""
    pass


class CatalogPreconditionError(CatalogError, ValueError):
    """
    Raised when a catalog operation is called with arguments that violate its
    contract, e.g. a missing product or restoring a product that is not
    deleted. Never swallowed by batch processing.
    """
    pass


class InvalidAttributeSelection(CatalogError, ValueError):
    """Raised when an attribute selection payload cannot be decoded."""
    pass
