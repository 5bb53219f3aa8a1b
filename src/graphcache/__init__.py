try:
    from ._version import version as __version__  # populated by setuptools-scm
except ModuleNotFoundError:
    __version__ = "0.0.0"

from .config import CacheSettings, get_settings
from .errors import ConfigError, DocumentError, GraphCacheError
from .keys import join_keys, key_of_entity, key_of_field
from .layered import LayeredMap
from .log import configure_logging
from .schema import schema_predicates
from .store import Store
from .types import (
    LINK,
    MISSING,
    Completeness,
    OperationRequest,
    QueryResult,
    ResolveInfo,
    WriteResult,
)

__all__ = [
    "__version__",
    "Store",
    "LayeredMap",
    "Completeness",
    "OperationRequest",
    "QueryResult",
    "WriteResult",
    "ResolveInfo",
    "LINK",
    "MISSING",
    "key_of_entity",
    "key_of_field",
    "join_keys",
    "schema_predicates",
    "CacheSettings",
    "get_settings",
    "configure_logging",
    "GraphCacheError",
    "ConfigError",
    "DocumentError",
]
