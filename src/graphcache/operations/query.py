from __future__ import annotations

"""
Read traversal: answer a document from the store.

The walk is depth-first in document order. Every field that cannot be
answered from cache reads as ``None`` and marks the context partial, so a
single bad branch degrades the verdict instead of failing the read.
"""

from typing import TYPE_CHECKING, Any, Mapping, Optional, Tuple, Union

from graphql import DocumentNode, FieldNode, SelectionSetNode

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
from ..types import (
    LINK,
    MISSING,
    Completeness,
    Data,
    Entity,
    OperationRequest,
    QueryResult,
)
from .shared import Context, iter_fields

if TYPE_CHECKING:
    from ..store import Store

logger = getLogger(__name__)


def query(store: "Store", request: OperationRequest) -> QueryResult:
    document = parse_document(request.query)
    operation = get_main_operation(document, request.operation_name)
    root_key = store.schema.get_root_key(get_operation_kind(operation))

    ctx = Context(
        store=store,
        variables=normalize_variables(operation, request.variables),
        fragments=get_fragments(document),
    )

    entity = store.find(root_key)
    if entity is None:
        logger.debug("Root record %s is not cached", root_key)
        return QueryResult(None, Completeness.EMPTY, ctx.dependencies)

    ctx.dependencies.add(root_key)
    data, resolved_any = read_selection(ctx, root_key, entity, operation.selection_set)

    if not resolved_any and operation.selection_set.selections:
        return QueryResult(None, Completeness.EMPTY, ctx.dependencies)

    completeness = Completeness.PARTIAL if ctx.partial else Completeness.FULL
    logger.debug("Read %s from cache: %s", root_key, completeness.name)
    return QueryResult(data, completeness, ctx.dependencies)


def read_fragment(
    store: "Store",
    document: Union[DocumentNode, str],
    entity: Union[str, Mapping[str, Any]],
    variables: Optional[Mapping[str, Any]] = None,
) -> Optional[Data]:
    """
    Read the first fragment of ``document`` off one cached entity.

    Returns None when the entity is unknown, when the fragment's type
    condition does not apply to it, or when any selected field is missing.
    """
    document = parse_document(document)
    fragment = get_main_fragment(document)

    entity_key = entity if isinstance(entity, str) else key_of_entity(entity)
    if entity_key is None:
        logger.warning("Cannot read fragment %s: entity has no key", fragment.name.value)
        return None

    record = store.find(entity_key)
    if record is None:
        return None

    typename = record.get("__typename")
    if not store.schema.is_interface_of_type(fragment.type_condition.name.value, typename):
        return None

    ctx = Context(store=store, variables=dict(variables or {}), fragments=get_fragments(document))
    ctx.dependencies.add(entity_key)
    data, _ = read_selection(ctx, entity_key, record, fragment.selection_set)
    return None if ctx.partial else data


# ---------------------------------------------------------------------- #
# Records
# ---------------------------------------------------------------------- #


def read_selection(
    ctx: Context,
    entity_key: Optional[str],
    record: Entity,
    selection_set: SelectionSetNode,
) -> Tuple[Data, bool]:
    """
    Read ``selection_set`` off a record.

    ``entity_key`` is None for embedded records, which cannot own links.
    Also returns whether at least one field resolved from cache.
    """
    typename = record.get("__typename")
    data: Data = {}
    resolved_any = False

    for node in iter_fields(ctx, typename, selection_set):
        value = _read_field(ctx, entity_key, record, typename, node)
        if value is MISSING:
            ctx.partial = True
            value = None
        else:
            resolved_any = True
        data[get_field_alias(node)] = value

    return data, resolved_any


def _read_field(
    ctx: Context,
    entity_key: Optional[str],
    record: Entity,
    typename: Optional[str],
    node: FieldNode,
) -> Any:
    field_name = node.name.value
    if field_name == "__typename":
        return typename if typename is not None else MISSING

    args = get_field_arguments(node, ctx.variables)
    field_key = key_of_field(field_name, args)

    resolver = ctx.store.resolvers.get((typename, field_name))
    if resolver is not None:
        info = ctx.info(typename, entity_key, field_name)
        result = resolver(record, args or {}, ctx.store, info)
        if node.selection_set is None:
            value = result
        else:
            value = _read_resolver_result(ctx, result, node.selection_set)
    else:
        slot = record.get(field_key, MISSING)
        if slot is MISSING:
            logger.debug("Field %s is not cached on %s", field_key, entity_key or typename)
            return MISSING

        if node.selection_set is None:
            # a link read as a leaf has no scalar value to offer
            value = MISSING if slot is LINK else slot
        elif slot is LINK:
            value = _read_link_slot(ctx, entity_key, field_key, node.selection_set)
        else:
            value = _read_inline(ctx, slot, node.selection_set)

    if value is None and not ctx.store.schema.is_field_nullable(typename, field_name):
        ctx.partial = True
    return value


# ---------------------------------------------------------------------- #
# Links
# ---------------------------------------------------------------------- #


def _read_link_slot(
    ctx: Context,
    entity_key: Optional[str],
    field_key: str,
    selection_set: SelectionSetNode,
) -> Any:
    if entity_key is None:
        return MISSING
    link = ctx.store.read_link(join_keys(entity_key, field_key))
    if link is MISSING:
        return MISSING
    return _read_link(ctx, link, selection_set)


def _read_link(ctx: Context, link: Any, selection_set: SelectionSetNode) -> Any:
    if link is None:
        return None
    if isinstance(link, list):
        return [_read_link(ctx, item, selection_set) for item in link]
    return _read_entity(ctx, link, selection_set)


def _read_entity(ctx: Context, entity_key: str, selection_set: SelectionSetNode) -> Optional[Data]:
    ctx.dependencies.add(entity_key)
    entity = ctx.store.find(entity_key)
    if entity is None:
        logger.debug("Link points at %s which is not cached", entity_key)
        ctx.partial = True
        return None
    data, _ = read_selection(ctx, entity_key, entity, selection_set)
    return data


# ---------------------------------------------------------------------- #
# Inline values
# ---------------------------------------------------------------------- #


def _read_inline(ctx: Context, value: Any, selection_set: SelectionSetNode) -> Any:
    if value is None:
        return None
    if isinstance(value, list):
        return [_settle(ctx, _read_inline(ctx, item, selection_set)) for item in value]
    if not isinstance(value, dict):
        return MISSING

    # identifiable objects inside embedded records are stored as stubs
    entity_key = key_of_entity(value)
    if entity_key is not None:
        return _read_entity(ctx, entity_key, selection_set)

    data, _ = read_selection(ctx, None, value, selection_set)
    return data


def _read_resolver_result(ctx: Context, result: Any, selection_set: SelectionSetNode) -> Any:
    if result is None:
        return None
    if isinstance(result, list):
        return [_settle(ctx, _read_resolver_result(ctx, item, selection_set)) for item in result]
    if isinstance(result, str):
        return _read_entity(ctx, result, selection_set)
    if not isinstance(result, Mapping):
        return MISSING

    entity_key = ctx.store.key_of(result)
    if entity_key is not None:
        entity = ctx.store.find(entity_key)
        if entity is not None:
            ctx.dependencies.add(entity_key)
            data, _ = read_selection(ctx, entity_key, entity, selection_set)
            return data

    return _read_plain_data(ctx, result, selection_set)


def _read_plain_data(ctx: Context, result: Mapping[str, Any], selection_set: SelectionSetNode) -> Data:
    """Read resolver-produced data that never went through the store."""
    typename = result.get("__typename")
    data: Data = {}

    for node in iter_fields(ctx, typename, selection_set):
        alias = get_field_alias(node)
        field_name = node.name.value
        if field_name in result:
            value = result[field_name]
        elif alias in result:
            value = result[alias]
        else:
            ctx.partial = True
            data[alias] = None
            continue

        if node.selection_set is not None:
            value = _read_resolver_result(ctx, value, node.selection_set)
            if value is MISSING:
                ctx.partial = True
                value = None
        data[alias] = value

    return data


def _settle(ctx: Context, value: Any) -> Any:
    if value is MISSING:
        ctx.partial = True
        return None
    return value
