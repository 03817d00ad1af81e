""" Expose join types as a graphql-core schema

* Every join type becomes a GraphQLObjectType
* Fields of the root type are resolved by the engine: they build a request from the GraphQL query and fetch it
* Every other field just picks the value that has already been fetched, by its output key
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

import graphql

from graphjoiner import exc
from graphjoiner.engine.fields import FieldDefinition, FieldKind
from graphjoiner.engine.relationship import Cardinality, Relationship
from graphjoiner.engine.settings import ExecutionSettings, DEFAULT_SETTINGS

from .request import request_from_graphql_ast


if TYPE_CHECKING:
    from graphjoiner.engine.join_type import JoinType


def graphql_schema(root: JoinType, settings: ExecutionSettings = None, **kwargs) -> graphql.GraphQLSchema:
    """ Make a GraphQL schema with `root` as the query type

    Example:
        schema = graphql_schema(Root)
        res = await graphql.graphql(schema, '{ books { title } }')

    Args:
        root: The query type
        settings: Execution settings for queries that root fields run
        **kwargs: More arguments for GraphQLSchema

    Raises:
        exc.SchemaDefinitionError: a root relationship has join keys
    """
    from graphjoiner.engine.join_type import RootJoinType

    # The root has one empty row: there's nothing to join on
    if isinstance(root, RootJoinType):
        for name, field in root.fields().items():
            if field.kind is not FieldKind.IMMEDIATE and not field.is_cross_join:  # type: ignore[attr-defined]
                raise exc.SchemaDefinitionError(f'Root field "{root.name}.{name}" must not have join keys')

    # Settings only matter to root fields: nested types are shared
    query_type = root.to_graphql_type() if settings is None else graphql_object_type(root, settings)
    return graphql.GraphQLSchema(query=query_type, **kwargs)


def graphql_object_type(join_type: JoinType, settings: ExecutionSettings = None) -> graphql.GraphQLObjectType:
    """ Make a GraphQL type for a join type. Use JoinType.to_graphql_type(): it's memoized """
    settings = settings or DEFAULT_SETTINGS

    return graphql.GraphQLObjectType(
        name=join_type.name,
        fields=lambda: {
            name: graphql_field(field, settings)
            for name, field in join_type.fields().items()
        },
        description=join_type.description,
    )


def graphql_field(field: FieldDefinition, settings: ExecutionSettings = None) -> graphql.GraphQLField:
    """ Make a GraphQL field for a field definition """
    from graphjoiner.engine.join_type import RootJoinType

    # Fields of the root start the engine. All others have been fetched by the time GraphQL wants them.
    if field.kind is not FieldKind.IMMEDIATE and isinstance(field.parent, RootJoinType):
        resolve = root_field_resolver(field, settings or DEFAULT_SETTINGS)
    else:
        resolve = resolve_fetched_value

    return graphql.GraphQLField(
        graphql_output_type(field),
        args=field.args,
        resolve=resolve,
        description=field.description,
    )


def graphql_output_type(field: FieldDefinition) -> graphql.GraphQLOutputType:
    """ Get the GraphQL type of a field """
    if field.kind is FieldKind.IMMEDIATE:
        assert field.type is not None, f'{field!r} has no GraphQL type'  # type: ignore[attr-defined]
        return field.type  # type: ignore[attr-defined]
    elif field.kind is FieldKind.RELATIONSHIP:
        return _wrap_cardinality(field, field.target.to_graphql_type())  # type: ignore[attr-defined]
    elif field.kind is FieldKind.EXTRACT:
        return _wrap_cardinality(field.relationship, graphql_output_type(field.field))  # type: ignore[attr-defined]
    else:
        raise NotImplementedError(field.kind)


def _wrap_cardinality(relationship: Relationship, type_: graphql.GraphQLOutputType) -> graphql.GraphQLOutputType:
    if relationship.cardinality == Cardinality.MANY:
        return graphql.GraphQLList(type_)
    else:
        return type_


def resolve_fetched_value(source: dict, info: graphql.GraphQLResolveInfo, **args) -> Any:
    """ Resolver: get the value by its output key """
    return source[info.path.key]


def root_field_resolver(field: FieldDefinition, settings: ExecutionSettings):
    """ Make a resolver for a root field: it runs the engine """
    async def resolve_root_field(source: Any, info: graphql.GraphQLResolveInfo, **args) -> Any:
        request = request_from_graphql_ast(
            info.field_nodes,
            field.target_type(),
            info.variable_values,
            field=field,
            fragments=info.fragments,
            settings=settings,
        )
        results = await field.fetch(request, source, settings=settings, load_path=(field.parent.name,))  # type: ignore[attr-defined,union-attr]
        return results.get({})
    return resolve_root_field
