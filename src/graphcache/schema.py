from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, FrozenSet, Mapping, Optional, Protocol, Set, Tuple, Union

from graphql import (
    GraphQLInterfaceType,
    GraphQLObjectType,
    GraphQLSchema,
    build_client_schema,
    build_schema,
    is_abstract_type,
    is_non_null_type,
)

from .errors import ConfigError
from .log import getLogger

logger = getLogger(__name__)

SchemaInput = Union[GraphQLSchema, Mapping[str, Any], str]

DEFAULT_ROOT_TYPES: Dict[str, str] = {
    "query": "Query",
    "mutation": "Mutation",
    "subscription": "Subscription",
}


class SchemaPredicates(Protocol):
    """Schema-driven questions the traversals ask while walking a document."""

    def get_root_key(self, operation: str) -> str:
        """Type name addressing the root record of ``operation``."""

    def is_field_nullable(self, typename: Optional[str], field_name: str) -> bool:
        """Whether ``typename.field_name`` may legitimately read as null."""

    def is_interface_of_type(self, type_condition: str, typename: Optional[str]) -> bool:
        """Whether a fragment on ``type_condition`` applies to ``typename``."""


class PermissivePredicates:
    """
    Predicates used when no schema is available.

    Without structural information nothing can be ruled out, so every
    field is nullable and every fragment matches.
    """

    def get_root_key(self, operation: str) -> str:
        return DEFAULT_ROOT_TYPES[operation]

    def is_field_nullable(self, typename: Optional[str], field_name: str) -> bool:
        return True

    def is_interface_of_type(self, type_condition: str, typename: Optional[str]) -> bool:
        return True

    def __repr__(self) -> str:
        return "PermissivePredicates()"


class IntrospectedPredicates:
    """
    Predicates backed by a ``graphql-core`` schema.

    Possible types of every union and interface are collected once at
    construction. Types or fields missing from the schema are treated as
    nullable and reported once per (type, field) pair, since they usually
    point at a stale schema.
    """

    def __init__(self, schema: GraphQLSchema, *, warn_on_mismatch: bool = True) -> None:
        self._schema = schema
        self._warn_on_mismatch = warn_on_mismatch
        self._reported: Set[Tuple[Optional[str], Optional[str]]] = set()

        self._root_types: Dict[str, str] = dict(DEFAULT_ROOT_TYPES)
        for operation, root in (
            ("query", schema.query_type),
            ("mutation", schema.mutation_type),
            ("subscription", schema.subscription_type),
        ):
            if root is not None:
                self._root_types[operation] = root.name

        self._possible_types: Dict[str, FrozenSet[str]] = {}
        for name, named_type in schema.type_map.items():
            if is_abstract_type(named_type):
                self._possible_types[name] = frozenset(
                    t.name for t in schema.get_possible_types(named_type)  # type: ignore[arg-type]
                )

        logger.debug(
            "Schema predicates built: roots=%s abstract types=%s",
            self._root_types,
            sorted(self._possible_types),
        )

    @property
    def schema(self) -> GraphQLSchema:
        return self._schema

    def get_root_key(self, operation: str) -> str:
        return self._root_types[operation]

    def is_field_nullable(self, typename: Optional[str], field_name: str) -> bool:
        named_type = self._schema.get_type(typename) if typename else None
        if not isinstance(named_type, (GraphQLObjectType, GraphQLInterfaceType)):
            self._report(typename, None)
            return True

        field = named_type.fields.get(field_name)
        if field is None:
            self._report(typename, field_name)
            return True

        return not is_non_null_type(field.type)

    def is_interface_of_type(self, type_condition: str, typename: Optional[str]) -> bool:
        if type_condition == typename:
            return True
        possible = self._possible_types.get(type_condition)
        return possible is not None and typename in possible

    def _report(self, typename: Optional[str], field_name: Optional[str]) -> None:
        if not self._warn_on_mismatch or (typename, field_name) in self._reported:
            return
        self._reported.add((typename, field_name))
        if field_name is None:
            logger.warning("Type %r is not an object type in the schema; treating as nullable", typename)
        else:
            logger.warning(
                "Field %r is not defined on type %r in the schema; treating as nullable",
                field_name,
                typename,
            )

    def __repr__(self) -> str:
        return f"IntrospectedPredicates(roots={self._root_types})"


# ---------------------------------------------------------------------- #
# Construction
# ---------------------------------------------------------------------- #


def build_graphql_schema(schema: SchemaInput) -> GraphQLSchema:
    """
    Accept a ``GraphQLSchema``, an introspection result (with or without
    the ``data`` envelope) or SDL text.
    """
    if isinstance(schema, GraphQLSchema):
        return schema
    if isinstance(schema, str):
        return build_schema(schema)
    if isinstance(schema, Mapping):
        introspection = schema.get("data", schema)
        if "__schema" not in introspection:
            raise ConfigError("Introspection result has no '__schema' entry")
        return build_client_schema(introspection)  # type: ignore[arg-type]
    raise ConfigError(f"Unsupported schema input of type {type(schema).__name__}")


def schema_predicates(
    schema: Optional[SchemaInput] = None,
    *,
    warn_on_mismatch: bool = True,
) -> SchemaPredicates:
    if schema is None:
        return PermissivePredicates()
    return IntrospectedPredicates(
        build_graphql_schema(schema), warn_on_mismatch=warn_on_mismatch
    )


def load_introspection(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a JSON introspection result from disk."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Cannot read introspection result from {path}: {exc}") from exc
