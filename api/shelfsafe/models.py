from __future__ import annotations
from datetime import date, datetime, timezone
from typing import Any, List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from shelfsafe.services.identifiers import ID_FIELDS, document_id, normalize_id


def _unwrap(value: Any, key: str) -> Any:
    if isinstance(value, dict) and key in value:
        return value[key]
    return value


def _opt_str(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


def parse_quantity(value: Any) -> float:
    """Missing, non-numeric and negative quantities read as 0."""
    value = _unwrap(value, "$numberInt")
    value = _unwrap(value, "$numberDouble")
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        qty = float(value)
    except (TypeError, ValueError):
        return 0.0
    if qty != qty or qty < 0 or qty == float("inf"):
        return 0.0
    return qty


def parse_date(value: Any) -> Optional[date]:
    """ISO string, {"$date": ...} (ISO or epoch millis) or absent."""
    value = _unwrap(value, "$date")
    value = _unwrap(value, "$numberLong")
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).date()
        s = str(value).strip()
        if not s:
            return None
        if s.isdigit():
            return datetime.fromtimestamp(int(s) / 1000, tz=timezone.utc).date()
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
    except (ValueError, OverflowError, OSError):
        return None


# ---------------------------------------------------------
# Store documents (lenient read models)
# ---------------------------------------------------------
class StoreDocument(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def identity(cls, data: Any) -> Any:
        # same rule as the resolution layer: `_id`, then `id` when `_id` is unusable
        if isinstance(data, dict):
            doc_id = document_id(data)
            data = {k: v for k, v in data.items() if k not in ID_FIELDS}
            data["id"] = doc_id
        return data


class Product(StoreDocument):
    name: Optional[str] = None
    category: Optional[str] = None
    # legacy documents call it barcodeUpc
    barcode: Optional[str] = Field(default=None, validation_alias=AliasChoices("barcode", "barcodeUpc"))

    @field_validator("name", "category", "barcode", mode="before")
    @classmethod
    def text_value(cls, v: Any) -> Optional[str]:
        return _opt_str(v)


class InventoryLot(StoreDocument):
    product_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("productId", "product_id"))
    product_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("productName", "product_name"))
    # quantityOnHand is canonical; qtyOnHand is read only when it is absent
    quantity_on_hand: float = Field(
        default=0.0,
        validation_alias=AliasChoices("quantityOnHand", "qtyOnHand"),
    )
    expiry_date: Optional[date] = Field(default=None, validation_alias=AliasChoices("expiryDate", "expiry_date"))
    status: Optional[str] = None

    @field_validator("product_id", mode="before")
    @classmethod
    def norm_product_id(cls, v: Any) -> Optional[str]:
        return normalize_id(v)

    @field_validator("quantity_on_hand", mode="before")
    @classmethod
    def quantity_value(cls, v: Any) -> float:
        return parse_quantity(v)

    @field_validator("expiry_date", mode="before")
    @classmethod
    def expiry_value(cls, v: Any) -> Optional[date]:
        return parse_date(v)

    @field_validator("product_name", "status", mode="before")
    @classmethod
    def text_value(cls, v: Any) -> Optional[str]:
        return _opt_str(v)


class Attachment(StoreDocument):
    entity_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("entityType", "entity_type"))
    entity_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("entityId", "entity_id"))
    url: Optional[str] = None
    is_deleted: bool = Field(default=False, validation_alias=AliasChoices("isDeleted", "is_deleted"))

    @field_validator("entity_id", mode="before")
    @classmethod
    def norm_entity_id(cls, v: Any) -> Optional[str]:
        return normalize_id(v)

    @field_validator("entity_type", mode="before")
    @classmethod
    def text_value(cls, v: Any) -> Optional[str]:
        return _opt_str(v)

    @field_validator("url", mode="before")
    @classmethod
    def url_value(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) and v else None

    @field_validator("is_deleted", mode="before")
    @classmethod
    def deleted_flag(cls, v: Any) -> bool:
        return v is True


# ---------------------------------------------------------
# API responses
# ---------------------------------------------------------
class HealthOut(BaseModel):
    ok: bool
    message: str


# ---------------------------------------------------------
# Dashboard view
# ---------------------------------------------------------
class DashboardSummary(BaseModel):
    products: int = 0
    lots: int = 0
    total_qty_on_hand: float = 0.0
    attachments: int = 0


class ProductCard(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    category: Optional[str] = None
    barcode: Optional[str] = None
    image_url: Optional[str] = None


class LotCard(BaseModel):
    id: Optional[str] = None
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    quantity_on_hand: float = 0.0
    expiry_date: Optional[date] = None
    status: Optional[str] = None
    image_url: Optional[str] = None


class DashboardSnapshot(BaseModel):
    summary: DashboardSummary = Field(default_factory=DashboardSummary)
    products: List[ProductCard] = Field(default_factory=list)
    lots: List[LotCard] = Field(default_factory=list)
