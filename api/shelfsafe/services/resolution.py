# shelfsafe/services/resolution.py
"""
Attachment resolution - joins attachments to inventory lots and, through
the lots, to products.

    attachment.entityId -> lot._id        (lot index)
    lot.productId       -> product._id    (product images)

Both stages are first-write-wins in input order, so the result depends only
on the order of the input documents, never on how many attachments an
entity has. All functions are pure: they build and return fresh dicts.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional

from shelfsafe.services.identifiers import document_id, normalize_id

LOT_ENTITY_TYPE = "inventoryLots"


def _usable_url(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def is_live_attachment(attachment: Mapping[str, Any]) -> bool:
    return attachment.get("isDeleted") is not True


def build_lot_image_index(
    attachments: Iterable[Mapping[str, Any]],
    entity_type: Optional[str] = None,
) -> Dict[str, str]:
    """
    Map normalized lot id -> image URL, first usable attachment wins.

    Soft-deleted attachments are skipped even if the input was already
    filtered. `entity_type` re-applies the discriminator for unfiltered
    input; by default every entityType is accepted.
    """
    index: Dict[str, str] = {}
    for a in attachments:
        if not isinstance(a, Mapping) or not is_live_attachment(a):
            continue
        if entity_type is not None and a.get("entityType") != entity_type:
            continue

        url = _usable_url(a.get("url"))
        if url is None:
            continue

        lot_id = normalize_id(a.get("entityId"))
        if lot_id is None:
            continue

        if lot_id not in index:
            index[lot_id] = url
    return index


def resolve_product_images(
    lot_index: Mapping[str, str],
    lots: Iterable[Mapping[str, Any]],
) -> Dict[str, str]:
    """
    Map normalized product id -> image URL inherited from the first lot of
    that product that has an entry in `lot_index`.
    """
    images: Dict[str, str] = {}
    for lot in lots:
        if not isinstance(lot, Mapping):
            continue
        lot_id = document_id(lot)
        product_id = normalize_id(lot.get("productId"))
        if lot_id is None or product_id is None:
            continue

        url = lot_index.get(lot_id)
        if url is None:
            continue

        if product_id not in images:
            images[product_id] = url
    return images


@dataclass(frozen=True)
class Resolution:
    """Both lookup tables of one aggregation cycle (read-only views)."""
    lot_images: Mapping[str, str] = field(default_factory=dict)
    product_images: Mapping[str, str] = field(default_factory=dict)

    def image_for_product(self, product_id: Any) -> Optional[str]:
        key = normalize_id(product_id)
        return self.product_images.get(key) if key is not None else None

    def image_for_lot(self, lot_id: Any) -> Optional[str]:
        key = normalize_id(lot_id)
        return self.lot_images.get(key) if key is not None else None


def resolve(
    lots: Iterable[Mapping[str, Any]],
    attachments: Iterable[Mapping[str, Any]],
    entity_type: Optional[str] = None,
) -> Resolution:
    lot_index = build_lot_image_index(attachments, entity_type=entity_type)
    product_images = resolve_product_images(lot_index, lots)
    return Resolution(
        lot_images=MappingProxyType(lot_index),
        product_images=MappingProxyType(product_images),
    )
