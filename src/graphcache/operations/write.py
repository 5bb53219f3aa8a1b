from __future__ import annotations

"""
Write traversal: normalize a response payload into the store.

Identifiable objects become records linked from their parent; objects
without identity are stored inline in the parent's slot. When an
optimistic key is given, every mutation (including those made by update
handlers) lands in that layer and base state is left untouched.
"""

from typing import TYPE_CHECKING, Any, Mapping, Optional, Union, cast

from graphql import DocumentNode, SelectionSetNode

from ..documents import (
    get_field_alias,
    get_field_arguments,
    get_fragments,
    get_main_fragment,
    get_main_operation,
    get_operation_kind,
    normalize_variables,
    parse_document,
)
from ..keys import join_keys, key_of_entity, key_of_field
from ..log import getLogger
from ..types import LINK, MISSING, Data, Entity, Link, OperationRequest, WriteResult
from .shared import Context, iter_fields

if TYPE_CHECKING:
    from ..store import Store

logger = getLogger(__name__)


def write(
    store: "Store",
    request: OperationRequest,
    data: Data,
    optimistic_key: Optional[int] = None,
) -> WriteResult:
    document = parse_document(request.query)
    operation = get_main_operation(document, request.operation_name)
    kind = get_operation_kind(operation)
    root_key = store.schema.get_root_key(kind)

    ctx = Context(
        store=store,
        variables=normalize_variables(operation, request.variables),
        fragments=get_fragments(document),
        optimistic_key=optimistic_key,
    )

    with store.layer(optimistic_key):
        if kind == "query":
            record = store.find_or_create(root_key)
            ctx.dependencies.add(root_key)
            write_selection(ctx, root_key, record, data, operation.selection_set, root_key)
        else:
            # mutation and subscription roots are never persisted; only the
            # entities below them are normalized
            write_selection(ctx, None, {}, data, operation.selection_set, root_key)

    logger.debug(
        "Wrote %s into %s (%d entities)",
        root_key,
        "base" if optimistic_key is None else f"layer {optimistic_key}",
        len(ctx.dependencies),
    )
    return WriteResult(data, ctx.dependencies)


def write_fragment(
    store: "Store",
    document: Union[DocumentNode, str],
    data: Data,
    variables: Optional[Mapping[str, Any]] = None,
    optimistic_key: Optional[int] = None,
) -> WriteResult:
    """Write the first fragment of ``document`` onto the entity ``data`` identifies."""
    document = parse_document(document)
    fragment = get_main_fragment(document)

    ctx = Context(
        store=store,
        variables=dict(variables or {}),
        fragments=get_fragments(document),
        optimistic_key=optimistic_key,
    )

    entity_key = key_of_entity(data)
    if entity_key is None:
        logger.warning(
            "Cannot write fragment %s: data has no __typename and id", fragment.name.value
        )
        return WriteResult(None, ctx.dependencies)

    with store.layer(optimistic_key):
        write_entity(ctx, entity_key, data, fragment.selection_set)
    return WriteResult(data, ctx.dependencies)


# ---------------------------------------------------------------------- #
# Records
# ---------------------------------------------------------------------- #


def write_entity(
    ctx: Context, entity_key: str, data: Data, selection_set: SelectionSetNode
) -> str:
    """Normalize ``data`` into the record addressed by ``entity_key``."""
    ctx.dependencies.add(entity_key)
    record = ctx.store.find_or_create(entity_key)
    write_selection(ctx, entity_key, record, data, selection_set)
    return entity_key


def write_selection(
    ctx: Context,
    entity_key: Optional[str],
    record: Entity,
    data: Data,
    selection_set: SelectionSetNode,
    typename: Optional[str] = None,
) -> None:
    """
    Write ``data`` into ``record`` field by field.

    ``entity_key`` is None for embedded records; those store every nested
    object inline since they cannot own links.
    """
    typename = data.get("__typename") or typename
    if typename:
        record["__typename"] = typename

    for node in iter_fields(ctx, typename, selection_set):
        field_name = node.name.value
        alias = get_field_alias(node)
        if alias not in data:
            logger.debug("Payload for %s lacks field %s; skipping", entity_key or typename, alias)
            continue

        value = data[alias]
        if field_name == "__typename":
            continue

        args = get_field_arguments(node, ctx.variables)
        field_key = key_of_field(field_name, args)

        if node.selection_set is None:
            record[field_key] = value
        elif entity_key is not None and _is_linkable(value):
            link_key = join_keys(entity_key, field_key)
            record[field_key] = LINK
            ctx.store.set_link(link_key, _write_link(ctx, value, node.selection_set))
        else:
            if entity_key is not None:
                link_key = join_keys(entity_key, field_key)
                if ctx.store.read_link(link_key) is not MISSING:
                    ctx.store.remove_link(link_key)
            record[field_key] = _write_inline(ctx, value, node.selection_set)

        updater = ctx.store.updates.get((typename, field_name))
        if updater is not None:
            updater(value, args or {}, ctx.store, ctx.info(typename, entity_key, field_name))


# ---------------------------------------------------------------------- #
# Links and inline values
# ---------------------------------------------------------------------- #


def _is_linkable(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, list):
        return all(_is_linkable(item) for item in value)
    return isinstance(value, dict) and key_of_entity(value) is not None


def _write_link(ctx: Context, value: Any, selection_set: SelectionSetNode) -> Link:
    if value is None:
        return None
    if isinstance(value, list):
        return [_write_link(ctx, item, selection_set) for item in value]
    # _is_linkable admitted only identifiable objects
    return write_entity(ctx, cast(str, key_of_entity(value)), value, selection_set)


def _write_inline(ctx: Context, value: Any, selection_set: SelectionSetNode) -> Any:
    if isinstance(value, list):
        return [_write_inline(ctx, item, selection_set) for item in value]
    if not isinstance(value, dict):
        return value

    entity_key = key_of_entity(value)
    if entity_key is not None:
        # normalized on its own; the embedded slot keeps a stub to find it by
        write_entity(ctx, entity_key, value, selection_set)
        stub = {"__typename": value["__typename"]}
        id_field = "id" if value.get("id") is not None else "_id"
        stub[id_field] = value[id_field]
        return stub

    embedded: Entity = {}
    write_selection(ctx, None, embedded, value, selection_set)
    return embedded
