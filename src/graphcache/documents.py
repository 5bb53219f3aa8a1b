from __future__ import annotations

"""Helpers over graphql-core document ASTs used by both traversals."""

from typing import Any, Dict, Mapping, Optional, Union

from graphql import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    OperationDefinitionNode,
    SelectionNode,
    parse,
)
from graphql.pyutils import Undefined
from graphql.utilities import value_from_ast_untyped

from .errors import DocumentError
from .types import Fragments, Variables


def parse_document(document: Union[DocumentNode, str]) -> DocumentNode:
    if isinstance(document, DocumentNode):
        return document
    return parse(document)


def get_main_operation(
    document: DocumentNode, operation_name: Optional[str] = None
) -> OperationDefinitionNode:
    for definition in document.definitions:
        if not isinstance(definition, OperationDefinitionNode):
            continue
        if operation_name is None or (
            definition.name is not None and definition.name.value == operation_name
        ):
            return definition

    if operation_name is None:
        raise DocumentError("Document contains no operation definition")
    raise DocumentError(f"Document contains no operation named {operation_name!r}")


def get_fragments(document: DocumentNode) -> Fragments:
    return {
        definition.name.value: definition
        for definition in document.definitions
        if isinstance(definition, FragmentDefinitionNode)
    }


def get_main_fragment(document: DocumentNode) -> FragmentDefinitionNode:
    for definition in document.definitions:
        if isinstance(definition, FragmentDefinitionNode):
            return definition
    raise DocumentError("Document contains no fragment definition")


def get_operation_kind(operation: OperationDefinitionNode) -> str:
    return operation.operation.value


def normalize_variables(
    operation: OperationDefinitionNode, variables: Optional[Mapping[str, Any]] = None
) -> Variables:
    """Apply declared default values for variables the caller left out."""
    result: Variables = dict(variables or {})
    for definition in operation.variable_definitions or ():
        name = definition.variable.name.value
        if name not in result and definition.default_value is not None:
            result[name] = value_from_ast_untyped(definition.default_value)
    return result


def get_field_arguments(node: FieldNode, variables: Variables) -> Optional[Dict[str, Any]]:
    if not node.arguments:
        return None

    args: Dict[str, Any] = {}
    for argument in node.arguments:
        value = value_from_ast_untyped(argument.value, variables)
        if value is not Undefined:
            args[argument.name.value] = value
    return args or None


def get_field_alias(node: FieldNode) -> str:
    return node.alias.value if node.alias is not None else node.name.value


def should_include(node: SelectionNode, variables: Variables) -> bool:
    """Evaluate ``@skip`` and ``@include`` on a selection."""
    for directive in node.directives or ():
        name = directive.name.value
        if name not in ("skip", "include"):
            continue

        condition: Any = Undefined
        for argument in directive.arguments or ():
            if argument.name.value == "if":
                condition = value_from_ast_untyped(argument.value, variables)

        if name == "skip" and condition is True:
            return False
        if name == "include" and condition is not True:
            return False
    return True
