"""
graphcache.operations
=====================

Traversals that walk a GraphQL document against a Store.

- query          : read a document, returning data and a completeness verdict.
- read_fragment  : read one fragment off a cached entity.
- write          : normalize a response payload, optionally into a layer.
- write_fragment : normalize fragment data onto one entity.
"""

from __future__ import annotations

from .query import query, read_fragment
from .write import write, write_fragment

__all__ = ["query", "read_fragment", "write", "write_fragment"]
