from __future__ import annotations

"""Canonical identity strings for entities, field invocations and links."""

import json
from typing import Any, Mapping, Optional

# GraphQL names never contain a dot, so the first field name after the
# separator cannot be confused with part of an entity key.
KEY_SEPARATOR = "."


def key_of_entity(obj: Optional[Mapping[str, Any]]) -> Optional[str]:
    """
    Return ``"<typename>:<id>"`` for an identifiable object, else None.

    ``id`` wins over ``_id`` when both are present.
    """
    if not obj:
        return None

    typename = obj.get("__typename")
    if not typename:
        return None

    ident = obj.get("id")
    if ident is None:
        ident = obj.get("_id")
    if ident is None:
        return None

    return f"{typename}:{ident}"


def key_of_field(name: str, args: Optional[Mapping[str, Any]] = None) -> str:
    if not args:
        return name
    return f"{name}({_stringify(args)})"


def join_keys(parent_key: str, key: str) -> str:
    return f"{parent_key}{KEY_SEPARATOR}{key}"


def _stringify(args: Mapping[str, Any]) -> str:
    # sort_keys recurses into nested input objects as well
    return json.dumps(args, sort_keys=True, separators=(",", ":"), default=str)
