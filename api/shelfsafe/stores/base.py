# shelfsafe/stores/base.py
"""
Document store contract.

The API only ever asks a store for "all documents of collection X matching
filter F". Filters use a small MongoDB query subset:

    {"field": value}              equality
    {"field": {"$ne": value}}     inequality (missing field counts as unequal)
    {"field": {"$in": [a, b]}}    membership

Backends that are not MongoDB evaluate the subset with matches_filter().
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from shelfsafe.services.identifiers import REFERENCE_FIELDS, is_wrapped_id, same_id

Filter = Mapping[str, Any]


class StoreUnavailable(Exception):
    """The document store could not answer (unreachable, misconfigured, unreadable)."""


class DocumentStore(ABC):
    """Read-only view over named collections of JSON-like documents."""

    name: str = "store"

    async def connect(self) -> None:
        """Open connections. Backends that connect lazily leave this as is."""

    @abstractmethod
    async def ping(self) -> None:
        """Raise StoreUnavailable unless the backend answers."""

    @abstractmethod
    async def list_collection(self, collection: str, filter: Optional[Filter] = None) -> List[Dict[str, Any]]:
        """All documents of `collection` matching `filter`, in store order."""

    async def close(self) -> None:
        pass


# ============================================================================
# Filter evaluation (non-Mongo backends)
# ============================================================================

def _is_operator(expected: Any) -> bool:
    return isinstance(expected, Mapping) and bool(expected) and all(
        isinstance(k, str) and k.startswith("$") for k in expected
    ) and not is_wrapped_id(expected)


def _equal(field: str, actual: Any, expected: Any) -> bool:
    # identifiers compare by identity, whatever their wire shape
    if field in REFERENCE_FIELDS or is_wrapped_id(actual) or is_wrapped_id(expected):
        return same_id(actual, expected)
    if isinstance(actual, bool) or isinstance(expected, bool):
        return actual is expected
    return actual == expected


def matches_filter(doc: Mapping[str, Any], filter: Optional[Filter]) -> bool:
    if not filter:
        return True
    for field, expected in filter.items():
        actual = doc.get(field)
        if _is_operator(expected):
            for op, operand in expected.items():
                if op == "$ne":
                    if _equal(field, actual, operand):
                        return False
                elif op == "$in":
                    if not any(_equal(field, actual, o) for o in operand):
                        return False
                else:
                    raise ValueError(f"Unsupported filter operator: {op}")
        elif not _equal(field, actual, expected):
            return False
    return True
