# shelfsafe/services/dashboard.py
"""
Dashboard view - what the client shows for one aggregation cycle:
counters plus product and lot cards carrying their resolved image.
"""
from __future__ import annotations
from typing import Any, Iterable, List, Mapping, Optional

from shelfsafe.models import (
    Attachment, DashboardSnapshot, DashboardSummary,
    InventoryLot, LotCard, Product, ProductCard,
)
from shelfsafe.services.resolution import Resolution, resolve


def _docs(items: Iterable[Any]) -> List[Mapping[str, Any]]:
    return [d for d in items if isinstance(d, Mapping)]


def summarize(
    products: List[Mapping[str, Any]],
    lots: List[Mapping[str, Any]],
    attachments: List[Mapping[str, Any]],
) -> DashboardSummary:
    total_qty = sum(InventoryLot.model_validate(lot).quantity_on_hand for lot in lots)
    live = sum(1 for a in attachments if not Attachment.model_validate(a).is_deleted)
    return DashboardSummary(
        products=len(products),
        lots=len(lots),
        total_qty_on_hand=total_qty,
        attachments=live,
    )


def product_cards(products: List[Mapping[str, Any]], resolution: Resolution) -> List[ProductCard]:
    cards: List[ProductCard] = []
    for doc in products:
        p = Product.model_validate(doc)
        cards.append(ProductCard(
            id=p.id,
            name=p.name,
            category=p.category,
            barcode=p.barcode,
            image_url=resolution.image_for_product(p.id),
        ))
    return cards


def lot_cards(
    lots: List[Mapping[str, Any]],
    resolution: Resolution,
    product_names: Optional[Mapping[str, str]] = None,
) -> List[LotCard]:
    names = product_names or {}
    cards: List[LotCard] = []
    for doc in lots:
        lot = InventoryLot.model_validate(doc)
        # lots without a denormalized name borrow the product's
        product_name = lot.product_name or names.get(lot.product_id or "")
        cards.append(LotCard(
            id=lot.id,
            product_id=lot.product_id,
            product_name=product_name,
            quantity_on_hand=lot.quantity_on_hand,
            expiry_date=lot.expiry_date,
            status=lot.status,
            image_url=resolution.image_for_lot(lot.id),
        ))
    return cards


def build_snapshot(
    products: Iterable[Any],
    lots: Iterable[Any],
    attachments: Iterable[Any],
    entity_type: Optional[str] = None,
) -> DashboardSnapshot:
    """Resolve images and assemble the view. Inputs must be complete datasets."""
    products = _docs(products)
    lots = _docs(lots)
    attachments = _docs(attachments)

    resolution = resolve(lots, attachments, entity_type=entity_type)
    cards = product_cards(products, resolution)
    names = {c.id: c.name for c in cards if c.id is not None and c.name}
    return DashboardSnapshot(
        summary=summarize(products, lots, attachments),
        products=cards,
        lots=lot_cards(lots, resolution, product_names=names),
    )
