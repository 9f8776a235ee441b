# shelfsafe/services/identifiers.py
"""
Identifier normalization for documents coming from the store.

Identifiers reach us in two shapes:
- bare scalar:   "65f0c0ffee..." or 42
- wrapped:       {"$oid": "65f0c0ffee..."}  (MongoDB Extended JSON)

Every identity comparison goes through normalize_id(); raw values are never
compared directly.
"""
from __future__ import annotations
from typing import Any, Mapping, Optional

from bson import ObjectId

OID_KEY = "$oid"

# String forms that mean "no identity" when a missing value was stringified upstream
_SENTINELS = frozenset({"", "undefined", "null"})

# Document identity fields, in lookup order
ID_FIELDS = ("_id", "id")

# Fields holding an identity or a reference to another document
REFERENCE_FIELDS = ID_FIELDS + ("entityId", "productId")


def is_wrapped_id(value: Any) -> bool:
    return isinstance(value, Mapping) and OID_KEY in value


def normalize_id(value: Any) -> Optional[str]:
    """
    Canonical string for an identifier of unknown shape.

    Returns None ("no identity") for absent values, wrappers without the
    $oid key, booleans, containers and the sentinel strings. Callers must
    treat None as a join failure, never as a key.
    """
    if isinstance(value, Mapping):
        if OID_KEY not in value:
            return None
        value = value[OID_KEY]
        # a wrapper never nests another wrapper
        if isinstance(value, Mapping):
            return None

    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, ObjectId):
        return str(value)

    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        # 1.0 and 1 are the same identity
        if value.is_integer():
            value = int(value)
        out = str(value)
    elif isinstance(value, (str, int)):
        out = str(value)
    else:
        return None

    if out in _SENTINELS:
        return None
    return out


def document_id(doc: Mapping[str, Any]) -> Optional[str]:
    """Normalized identity of a document (`_id`, falling back to `id`)."""
    for field in ID_FIELDS:
        if field in doc:
            key = normalize_id(doc.get(field))
            if key is not None:
                return key
    return None


def same_id(a: Any, b: Any) -> bool:
    """True when both values carry an identity and it is the same one."""
    ka = normalize_id(a)
    return ka is not None and ka == normalize_id(b)
