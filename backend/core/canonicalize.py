"""
Structure canonicalization and content identity.

A workout's identity is the hash of its structure after canonicalization,
so the same structure fetched twice (with keys in any order) always
produces the same idempotency key on the destination.
"""

import hashlib
import json
from typing import Any, Optional

DEFAULT_PLATFORM_TAG = "TP"


def canonicalize(value: Any) -> Any:
    """
    Return a canonical copy of a JSON-like value.

    Mappings are rebuilt with keys in lexicographic order; lists keep
    their element order (they are sequences, not sets). Scalars are
    returned unchanged. Applying it twice yields the same result.
    """
    if isinstance(value, dict):
        return {str(key): canonicalize(value[key]) for key in sorted(value, key=str)}
    if isinstance(value, (list, tuple)):
        return [canonicalize(item) for item in value]
    return value


def canonical_json(value: Any) -> str:
    """Compact JSON text of the canonical form."""
    return json.dumps(
        canonicalize(value),
        separators=(",", ":"),
        ensure_ascii=False,
        sort_keys=True,
    )


def content_hash(value: Any) -> str:
    """sha256 hex digest of the canonical JSON of ``value``."""
    return hashlib.sha256(canonical_json(value).encode("utf-8")).hexdigest()


def identity_of(structure: Any, platform_tag: str = DEFAULT_PLATFORM_TAG) -> Optional[str]:
    """
    Derive the cross-platform identity of a raw workout structure.

    Args:
        structure: Structure object exactly as fetched from the source.
        platform_tag: Prefix naming the source platform.

    Returns:
        ``"<tag>:<sha256 hex>"``, or None when the workout has no
        structured data to hash.
    """
    if not isinstance(structure, dict):
        return None
    return f"{platform_tag}:{content_hash(structure)}"
