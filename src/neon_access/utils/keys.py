"""Deterministic cache keys for API operations."""

import hashlib
import json
from collections.abc import Mapping
from typing import Any


def _flatten(params: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    flat: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        name = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(_flatten(value, name))
        elif isinstance(value, (list, tuple)):
            flat[name] = [item for item in value if item is not None]
        else:
            flat[name] = value
    return flat


def build_cache_key(operation: str, params: Mapping[str, Any] | None = None) -> str:
    """Fingerprint an operation and its parameters.

    Parameters are flattened (nested mappings become dotted names), None
    values are dropped and the rest are JSON-encoded with sorted keys, so
    parameter order never changes the key. List order is kept because it
    is part of the value.

    Args:
        operation: Logical operation name
        params: Operation parameters

    Returns:
        ``"<operation>"`` when there are no parameters, otherwise
        ``"<operation>:<sha256 of the canonical parameters>"``
    """
    flat = _flatten(params or {})
    if not flat:
        return operation
    canonical = json.dumps(flat, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha256(canonical.encode()).hexdigest()
    return f"{operation}:{digest}"
