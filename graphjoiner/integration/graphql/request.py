""" Build a request tree from a GraphQL query

It goes through the query document, and:

1. Collects the selections of every node: fragment spreads and inline fragments are inlined
2. Drops selections excluded by @include and @skip
3. Merges selections that have the same output key
4. Coerces variables against their declared types, and arguments against the arguments declared by field definitions
5. Recurses into every selection, against the type that the field points to
"""

from __future__ import annotations

from collections import abc
from typing import Any, Optional, Union, TYPE_CHECKING

import graphql
from graphql.execution.values import get_argument_values, get_directive_values, get_variable_values

from graphjoiner import exc
from graphjoiner.request import Request
from graphjoiner.engine.settings import ExecutionSettings, DEFAULT_SETTINGS


if TYPE_CHECKING:
    from graphjoiner.engine.fields import FieldDefinition
    from graphjoiner.engine.join_type import JoinType


def request_from_graphql_document(document: graphql.DocumentNode, root: JoinType, variables: dict[str, Any] = None, *,
                                  operation_name: str = None,
                                  settings: ExecutionSettings = None) -> Request:
    """ Build the root request for a query document

    Args:
        document: The parsed query. See: graphql.parse()
        root: The type to resolve the operation against
        variables: Values for the variables of the operation
        operation_name: The operation to use, if the document has several. Default: the first one.
        settings: Execution settings

    Raises:
        exc.QueryError: structural errors
        exc.InvalidVariablesError: variable values do not fit their declared types
    """
    operation = _get_operation(document, operation_name)
    fragments = {
        definition.name.value: definition
        for definition in document.definitions
        if isinstance(definition, graphql.FragmentDefinitionNode)
    }

    return request_from_graphql_ast(
        operation,
        root,
        coerce_variables(root, operation, variables or {}),
        fragments=fragments,
        settings=settings,
    )


def request_from_graphql_ast(ast: Union[graphql.ExecutableDefinitionNode, graphql.FieldNode, abc.Sequence[graphql.FieldNode]],
                             root: Optional[JoinType],
                             variables: dict[str, Any] = None, *,
                             field: FieldDefinition = None,
                             fragments: dict[str, graphql.FragmentDefinitionNode] = None,
                             settings: ExecutionSettings = None) -> Request:
    """ Build a request from an AST node

    Example:
        In a resolver:
        request_from_graphql_ast(info.field_nodes, Book, info.variable_values, field=field, fragments=info.fragments)

    Args:
        ast: An operation, or a field node. Several field nodes are merged: as if they were one field.
        root: The type to resolve the selections of this node against
        variables: Values for the variables, already coerced. See: coerce_variables()
        field: The field definition of the node, for field nodes. Its arguments are used to coerce argument values.
        fragments: Fragments defined in the query
        settings: Execution settings
    """
    reader = RequestReader(
        variables=variables or {},
        fragments=fragments or {},
        max_depth=(settings or DEFAULT_SETTINGS).max_depth,
    )

    nodes = list(ast) if isinstance(ast, abc.Sequence) else [ast]
    return reader.read(nodes, root, field, depth=0)


class RequestReader:
    """ Reads AST nodes into requests """

    def __init__(self, variables: dict[str, Any], fragments: dict[str, graphql.FragmentDefinitionNode], max_depth: Optional[int]):
        self.variables = variables
        self.fragments = fragments
        self.max_depth = max_depth

    __slots__ = 'variables', 'fragments', 'max_depth'

    def read(self, nodes: list, join_type: Optional[JoinType], field: Optional[FieldDefinition], depth: int) -> Request:
        """ Read a node into a request

        Args:
            nodes: AST nodes with the same output key. The first one gives the name & arguments.
            join_type: The type that sub-selections are looked up on
            field: The field definition of this node
            depth: How deep we are in the tree
        """
        node = nodes[0]
        if isinstance(node, graphql.FieldNode):
            field_name = node.name.value
            key = node.alias.value if node.alias else field_name
            args = self.read_args(node, field) if field is not None else {}
        else:
            field_name = key = None
            args = {}

        return Request(
            field_name=field_name,
            key=key,
            field=field,
            args=args,
            selections=self.read_selections(nodes, join_type, depth),
        )

    def read_args(self, node: graphql.FieldNode, field: FieldDefinition) -> dict[str, Any]:
        """ Coerce argument values against the declared arguments """
        try:
            return get_argument_values(field, node, self.variables)  # type: ignore[arg-type]
        except graphql.GraphQLError as e:
            raise exc.InvalidArgumentError(node.name.value, e.message) from e

    def read_selections(self, nodes: list, join_type: Optional[JoinType], depth: int) -> tuple[Request, ...]:
        """ Collect, merge, and read the sub-selections of the nodes """
        # Collect: { key => [FieldNode] }
        collected: dict[str, list[graphql.FieldNode]] = {}
        for node in nodes:
            if node.selection_set:
                self.collect(node.selection_set, collected, ())

        if not collected:
            return ()

        # Sub-selections on something that has no fields
        if join_type is None:
            raise exc.QueryError(f'Field "{nodes[0].name.value}" has no sub-fields to select')

        # Depth
        if self.max_depth is not None and depth + 1 > self.max_depth:
            raise exc.QueryDepthError(depth + 1, self.max_depth)

        # Read every selection against its field definition
        selections = []
        for key, field_nodes in collected.items():
            field = join_type.get_field(field_nodes[0].name.value)
            selections.append(self.read(field_nodes, field.target_type(), field, depth + 1))
        return tuple(selections)

    def collect(self, selection_set: graphql.SelectionSetNode, collected: dict[str, list[graphql.FieldNode]], open_fragments: tuple[str, ...]):
        """ Collect fields from a selection set, inlining fragments

        Args:
            selection_set: The selection set to walk
            collected: (out) { key => [FieldNode] }
            open_fragments: Names of fragments that are being inlined right now
        """
        for selection in selection_set.selections:
            if not self.should_include(selection):
                continue

            # Field
            if isinstance(selection, graphql.FieldNode):
                # Meta fields, like __typename, are resolved by GraphQL itself
                if selection.name.value.startswith('__'):
                    continue

                key = selection.alias.value if selection.alias else selection.name.value
                collected.setdefault(key, []).append(selection)
            # Fragment spread (`... fragmentName`)
            elif isinstance(selection, graphql.FragmentSpreadNode):
                name = selection.name.value
                if name in open_fragments:
                    raise exc.FragmentCycleError((*open_fragments, name))

                try:
                    fragment = self.fragments[name]
                except KeyError:
                    raise exc.UnknownFragmentError(name)

                self.collect(fragment.selection_set, collected, (*open_fragments, name))
            # Inline fragment (`... on Book { }`)
            elif isinstance(selection, graphql.InlineFragmentNode):
                self.collect(selection.selection_set, collected, open_fragments)
            # Something new
            else:
                raise NotImplementedError(str(type(selection)))

    def should_include(self, node: graphql.SelectionNode) -> bool:
        """ Check @include and @skip directives """
        for directive in node.directives or ():
            name = directive.name.value
            if name == 'include':
                if not self._directive_condition(graphql.GraphQLIncludeDirective, node):
                    return False
            elif name == 'skip':
                if self._directive_condition(graphql.GraphQLSkipDirective, node):
                    return False
            else:
                raise exc.UnknownDirectiveError(name)
        return True

    def _directive_condition(self, directive: graphql.GraphQLDirective, node: graphql.SelectionNode) -> bool:
        try:
            values = get_directive_values(directive, node, self.variables)
        except graphql.GraphQLError as e:
            raise exc.InvalidArgumentError(f'@{directive.name}', e.message) from e
        return bool(values and values['if'])


def _get_operation(document: graphql.DocumentNode, operation_name: Optional[str]) -> graphql.OperationDefinitionNode:
    """ Pick the operation to execute """
    operations = [
        definition
        for definition in document.definitions
        if isinstance(definition, graphql.OperationDefinitionNode)
    ]

    for operation in operations:
        if operation_name is None or (operation.name and operation.name.value == operation_name):
            return operation
    else:
        raise exc.QueryError(f'Operation "{operation_name}" not found' if operation_name else 'Document has no operations')


def coerce_variables(root: JoinType, operation: graphql.OperationDefinitionNode, variables: dict[str, Any]) -> dict[str, Any]:
    """ Coerce variable values against the types the operation declares, apply defaults

    Variable types are looked up in the schema made from `root`: see graphql_schema()

    Raises:
        exc.InvalidVariablesError: a value does not fit its type, or a required variable is missing
    """
    if not operation.variable_definitions:
        return dict(variables)

    from .schema import graphql_schema

    coerced = get_variable_values(graphql_schema(root), operation.variable_definitions, variables)
    if isinstance(coerced, list):
        raise exc.InvalidVariablesError(
            operation.name.value if operation.name else None,
            [error.message for error in coerced],
        )
    return coerced
