# shelfsafe/services/__init__.py
"""
Business logic services for ShelfSafe.
"""
from shelfsafe.services.identifiers import normalize_id, document_id
from shelfsafe.services.resolution import (
    Resolution, build_lot_image_index, resolve, resolve_product_images,
)

__all__ = [
    "normalize_id",
    "document_id",
    "Resolution",
    "build_lot_image_index",
    "resolve_product_images",
    "resolve",
]
