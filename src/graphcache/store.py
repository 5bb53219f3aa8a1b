from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Mapping, Optional, Union

from graphql import DocumentNode

from .config import CacheSettings
from .errors import ConfigError
from .keys import join_keys, key_of_entity, key_of_field
from .layered import LayeredMap
from .log import getLogger
from .operations import query, read_fragment, write, write_fragment
from .schema import SchemaInput, SchemaPredicates, load_introspection, schema_predicates
from .types import (
    LINK,
    MISSING,
    Data,
    Entity,
    Link,
    OperationRequest,
    QueryResult,
    ResolverTable,
    UpdatesTable,
    Variables,
    WriteResult,
)

logger = getLogger(__name__)

Document = Union[DocumentNode, str]


class _Recreated(dict):
    """Layer record written after a removal in the same layer; hides older values."""


class Store:
    """
    Normalized entity and link store for GraphQL responses.

    - Records map entity keys to flat field mappings; a slot holding
      ``LINK`` is resolved through the links map.
    - Links map joined link keys to None, an entity key or a list of them.
    - Both maps are layered: while a layer is active (see ``layer``) every
      mutation lands in that optimistic layer and base is untouched.
    - Resolvers and update handlers are looked up by (typename, field name).
    """

    def __init__(
        self,
        resolvers: Optional[Mapping[Any, Any]] = None,
        updates: Optional[Mapping[Any, Any]] = None,
        schema: Optional[SchemaInput] = None,
        *,
        settings: Optional[CacheSettings] = None,
    ) -> None:
        """
        Parameters
        ----------
        resolvers:
            ``{typename: {field_name: fn}}`` or ``{(typename, field_name): fn}``.
            A resolver replaces the cached value of a field at read time.
        updates:
            Same shape; an update handler runs after a field is written.
        schema:
            Introspection result, ``GraphQLSchema`` or SDL. Without one the
            store runs permissively.
        settings:
            Optional CacheSettings; an introspection path configured there is
            loaded when ``schema`` is not given.
        """
        self._settings = settings or CacheSettings()
        self._records: LayeredMap[Entity] = LayeredMap()
        self._links: LayeredMap[Link] = LayeredMap()
        self._layer: Optional[int] = None

        self.resolvers: ResolverTable = _build_table(resolvers, "resolver")
        self.updates: UpdatesTable = _build_table(updates, "update handler")

        if schema is None and self._settings.introspection.path is not None:
            schema = load_introspection(self._settings.introspection.path)
        self.schema: SchemaPredicates = schema_predicates(
            schema, warn_on_mismatch=self._settings.introspection.warn_on_mismatch
        )

        self._root_keys = {
            self.schema.get_root_key(kind) for kind in ("query", "mutation", "subscription")
        }

        logger.debug(
            "Store created with %d resolvers, %d update handlers, schema=%r",
            len(self.resolvers),
            len(self.updates),
            self.schema,
        )

    # ------------------------------------------------------------------ #
    # Optimistic layers
    # ------------------------------------------------------------------ #

    @property
    def active_layer(self) -> Optional[int]:
        return self._layer

    @contextmanager
    def layer(self, optimistic_key: Optional[int]) -> Iterator["Store"]:
        """
        Route every store mutation inside the block to ``optimistic_key``.

        ``None`` keeps whatever layer is already active.
        """
        if optimistic_key is None:
            yield self
            return

        previous = self._layer
        self._layer = optimistic_key
        try:
            yield self
        finally:
            self._layer = previous

    @property
    def optimistic_keys(self) -> List[int]:
        """Open layers, newest first."""
        seen = dict.fromkeys(self._records.layer_ids)
        seen.update(dict.fromkeys(self._links.layer_ids))
        return list(seen)

    def clear_optimistic(self, optimistic_key: int) -> None:
        self._records.clear(optimistic_key)
        self._links.clear(optimistic_key)
        logger.debug("Cleared optimistic layer %s", optimistic_key)

    # ------------------------------------------------------------------ #
    # Records
    # ------------------------------------------------------------------ #

    def find(self, key: str) -> Optional[Entity]:
        """
        Return the visible record for ``key`` or None.

        Layers hold partial records; when any are open the visible record is
        their merge over base, newest fields winning. A removal, or a record
        recreated after one in the same layer, hides everything older.
        """
        partials = []
        for value in self._records.stack(key):
            if value is MISSING:
                break
            partials.append(value)
            if isinstance(value, _Recreated):
                break

        if not partials:
            return None
        if len(partials) == 1:
            return partials[0]

        merged: Entity = {}
        for partial in reversed(partials):
            merged.update(partial)
        return merged

    def find_or_create(self, key: str) -> Entity:
        """Return a mutable record for ``key`` in the active layer (or base)."""
        if self._layer is None:
            record = self._records.base.get(key)
            if record is None:
                record = {}
                self._records.set(key, record)
            return record

        record = self._records.layer(self._layer).get(key)
        if record is MISSING:
            # removed earlier in this layer; nothing below may show through
            record = _Recreated()
            self._records.set(key, record, self._layer)
        elif record is None:
            record = {}
            self._records.set(key, record, self._layer)
        return record

    def remove(self, key: str) -> None:
        # links pointing at the removed record are left dangling
        self._records.set(key, MISSING, self._layer)

    def key_of(self, record: Mapping[str, Any]) -> Optional[str]:
        """Entity key of ``record``; root records are addressed by type name."""
        key = key_of_entity(record)
        if key is None:
            typename = record.get("__typename")
            if typename in self._root_keys:
                return typename
        return key

    def resolve_entity(self, entity: Mapping[str, Any]) -> Optional[Entity]:
        key = key_of_entity(entity)
        return self.find(key) if key is not None else None

    # ------------------------------------------------------------------ #
    # Links
    # ------------------------------------------------------------------ #

    def read_link(self, key: str) -> Any:
        """Link stored under the joined ``key``, or ``MISSING`` if unknown."""
        return self._links.get(key)

    def set_link(self, key: str, link: Link) -> None:
        self._links.set(key, link, self._layer)

    def remove_link(self, key: str) -> None:
        self._links.set(key, MISSING, self._layer)

    # ------------------------------------------------------------------ #
    # Property resolution
    # ------------------------------------------------------------------ #

    def resolve_property(
        self,
        parent: Mapping[str, Any],
        field_name: str,
        args: Optional[Variables] = None,
    ) -> Any:
        """
        Resolve one field of a cached record.

        Inline values are returned as they are. Link slots are followed
        through the links map; list links resolve element-wise, keeping a
        None in place of every key that is null or no longer cached. An
        uncached field, or a link off a record without a key, reads as None.
        """
        field_key = key_of_field(field_name, args)
        value = parent.get(field_key, MISSING)

        if value is MISSING:
            return None
        if value is not LINK:
            return value

        entity_key = self.key_of(parent)
        if entity_key is None:
            return None

        return self._resolve_link(self.read_link(join_keys(entity_key, field_key)))

    def _resolve_link(self, link: Any) -> Any:
        if link is None or link is MISSING:
            return None
        if isinstance(link, list):
            return [self._resolve_link(key) for key in link]
        return self.find(link)

    # ------------------------------------------------------------------ #
    # Documents
    # ------------------------------------------------------------------ #

    def query(
        self,
        document: Document,
        variables: Optional[Variables] = None,
        operation_name: Optional[str] = None,
    ) -> QueryResult:
        return query(self, OperationRequest(document, variables, operation_name))

    def read_query(
        self,
        document: Document,
        variables: Optional[Variables] = None,
    ) -> Optional[Data]:
        """Cached data for ``document``, or None unless it is fully cached."""
        result = self.query(document, variables)
        return result.data if result.is_complete else None

    def write(
        self,
        document: Document,
        data: Data,
        variables: Optional[Variables] = None,
        optimistic_key: Optional[int] = None,
        operation_name: Optional[str] = None,
    ) -> WriteResult:
        return write(
            self, OperationRequest(document, variables, operation_name), data, optimistic_key
        )

    def update_query(
        self,
        document: Document,
        updater: Callable[[Optional[Data]], Optional[Data]],
        variables: Optional[Variables] = None,
    ) -> None:
        """
        Read-modify-write one query's cached data.

        The updater receives whatever is cached (None when nothing is) and
        its return value is written back; returning None leaves the store
        unchanged.
        """
        request = OperationRequest(document, variables)
        current = query(self, request).data
        updated = updater(current)
        if updated is None:
            logger.debug("update_query updater returned None; nothing written")
            return
        write(self, request, updated)

    def write_fragment(
        self,
        document: Document,
        data: Data,
        variables: Optional[Variables] = None,
    ) -> None:
        write_fragment(self, document, data, variables)

    def read_fragment(
        self,
        document: Document,
        entity: Union[str, Mapping[str, Any]],
        variables: Optional[Variables] = None,
    ) -> Optional[Data]:
        return read_fragment(self, document, entity, variables)

    # ------------------------------------------------------------------ #
    # Optimistic mutations
    # ------------------------------------------------------------------ #

    def write_optimistic(
        self,
        document: Document,
        data: Data,
        optimistic_key: int,
        variables: Optional[Variables] = None,
    ) -> WriteResult:
        return self.write(document, data, variables, optimistic_key=optimistic_key)

    def commit_optimistic(
        self,
        document: Document,
        data: Data,
        optimistic_key: int,
        variables: Optional[Variables] = None,
    ) -> WriteResult:
        """
        Promote a mutation's confirmed ``data`` into base and drop its layer.

        The layer is dropped before the write so update handlers read
        committed state rather than their own speculative results.
        """
        self.clear_optimistic(optimistic_key)
        result = self.write(document, data, variables)
        logger.info("Committed optimistic layer %s", optimistic_key)
        return result

    def __repr__(self) -> str:
        return f"Store(records={self._records!r}, links={self._links!r})"


# ---------------------------------------------------------------------- #
# Configuration tables
# ---------------------------------------------------------------------- #


def _build_table(config: Optional[Mapping[Any, Any]], kind: str) -> dict:
    """
    Normalize ``{typename: {field: fn}}`` or ``{(typename, field): fn}`` into
    a flat mapping keyed by (typename, field).
    """
    table: dict = {}
    for key, value in (config or {}).items():
        if isinstance(key, tuple):
            if len(key) != 2 or not all(isinstance(part, str) for part in key):
                raise ConfigError(f"Invalid {kind} key {key!r}; expected (typename, field)")
            entries = [(key, value)]
        elif isinstance(key, str) and isinstance(value, Mapping):
            entries = [((key, field_name), fn) for field_name, fn in value.items()]
        else:
            raise ConfigError(
                f"Invalid {kind} configuration for {key!r}; expected a mapping of fields"
            )

        for pair, fn in entries:
            if not callable(fn):
                raise ConfigError(f"{kind.capitalize()} for {pair[0]}.{pair[1]} is not callable")
            table[pair] = fn
    return table
