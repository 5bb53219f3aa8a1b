from __future__ import annotations

"""Exception hierarchy for graphcache."""


class GraphCacheError(Exception):
    """Base exception for graphcache failures."""
    pass


class ConfigError(GraphCacheError, RuntimeError):
    """Configuration-related error (resolver tables, schema input, settings)."""
    pass


class DocumentError(GraphCacheError, ValueError):
    """A document handed to the cache lacks the definition it needs."""
    pass
