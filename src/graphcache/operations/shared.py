from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, Optional, Set

from graphql import FieldNode, FragmentSpreadNode, InlineFragmentNode, SelectionSetNode

from ..documents import should_include
from ..log import getLogger
from ..types import Fragments, ResolveInfo, Variables

if TYPE_CHECKING:
    from ..store import Store

logger = getLogger(__name__)


@dataclass
class Context:
    """State shared by one read or write traversal."""

    store: "Store"
    variables: Variables
    fragments: Fragments
    optimistic_key: Optional[int] = None
    partial: bool = False
    dependencies: Set[str] = field(default_factory=set)

    def info(
        self,
        parent_typename: Optional[str],
        parent_key: Optional[str],
        field_name: str,
    ) -> ResolveInfo:
        return ResolveInfo(
            fragments=self.fragments,
            variables=self.variables,
            parent_typename=parent_typename,
            parent_key=parent_key,
            field_name=field_name,
            optimistic_key=self.optimistic_key,
        )


def iter_fields(
    ctx: Context,
    typename: Optional[str],
    selection_set: SelectionSetNode,
) -> Iterator[FieldNode]:
    """
    Flatten a selection set into its field nodes for a concrete type.

    Fragment spreads and inline fragments are expanded in document order;
    branches whose type condition does not apply to ``typename`` are
    skipped. An undeclared fragment contributes nothing and marks the
    traversal as partial.
    """
    for node in selection_set.selections:
        if not should_include(node, ctx.variables):
            continue

        if isinstance(node, FieldNode):
            yield node
            continue

        if isinstance(node, FragmentSpreadNode):
            fragment = ctx.fragments.get(node.name.value)
            if fragment is None:
                logger.warning("Fragment %r is referenced but not declared", node.name.value)
                ctx.partial = True
                continue
            type_condition: Optional[str] = fragment.type_condition.name.value
            fragment_selection = fragment.selection_set
        elif isinstance(node, InlineFragmentNode):
            type_condition = node.type_condition.name.value if node.type_condition else None
            fragment_selection = node.selection_set
        else:  # pragma: no cover
            continue

        if type_condition is None or ctx.store.schema.is_interface_of_type(type_condition, typename):
            yield from iter_fields(ctx, typename, fragment_selection)
        else:
            logger.debug(
                "Skipping fragment on %s for concrete type %s", type_condition, typename
            )
