from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Set, Union

from graphql import DocumentNode, FragmentDefinitionNode

if TYPE_CHECKING:
    from .store import Store


class Marker(Enum):
    """
    Explicit tags for entity field slots and map values.

    LINK:    the slot's value lives in the links map under the joined key.
    MISSING: no value (absent key, or a tombstone inside an optimistic layer).
    """
    LINK = "link"
    MISSING = "missing"

    def __repr__(self) -> str:
        return f"<{self.name}>"


LINK = Marker.LINK
MISSING = Marker.MISSING


class Completeness(IntEnum):
    EMPTY = 0
    PARTIAL = 1
    FULL = 2


# Records are flat mappings of field key -> inline value or LINK.
Entity = Dict[str, Any]
Data = Dict[str, Any]
Variables = Dict[str, Any]
Fragments = Dict[str, FragmentDefinitionNode]

# A link is None, an entity key, or a (possibly nested) list of those.
Link = Union[None, str, List[Any]]


@dataclass(slots=True)
class ResolveInfo:
    """Context handed to resolvers and update handlers."""

    fragments: Fragments
    variables: Variables
    parent_typename: Optional[str] = None
    parent_key: Optional[str] = None
    field_name: Optional[str] = None
    optimistic_key: Optional[int] = None


Resolver = Callable[[Entity, Variables, "Store", ResolveInfo], Any]
UpdateResolver = Callable[[Any, Variables, "Store", ResolveInfo], None]

ResolverTable = Dict[tuple, Resolver]
UpdatesTable = Dict[tuple, UpdateResolver]


@dataclass(slots=True)
class OperationRequest:
    query: Union[DocumentNode, str]
    variables: Optional[Variables] = None
    operation_name: Optional[str] = None


@dataclass(slots=True)
class QueryResult:
    data: Optional[Data]
    completeness: Completeness
    dependencies: Set[str] = field(default_factory=set)

    @property
    def is_complete(self) -> bool:
        return self.completeness is Completeness.FULL


@dataclass(slots=True)
class WriteResult:
    data: Optional[Data]
    dependencies: Set[str] = field(default_factory=set)
