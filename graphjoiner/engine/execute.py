""" Execute a GraphQL query against a root join type """

from __future__ import annotations

import asyncio
from typing import Any, Union

import graphql

from graphjoiner.integration.graphql.request import request_from_graphql_document
from graphjoiner.request import Request

from .join_type import JoinType
from .settings import ExecutionSettings


async def execute(root: JoinType, query: Union[str, graphql.DocumentNode], variables: dict[str, Any] = None, *,
                  operation_name: str = None,
                  settings: ExecutionSettings = None,
                  select: Any = None) -> dict[str, Any]:
    """ Execute a query: build the request tree, fetch everything, return the root value

    Example:
        result = await execute(Root, '{ books { title author { name } } }')
        #-> {'books': [{'title': ..., 'author': {'name': ...}}, ...]}

    Args:
        root: The root type
        query: The query: text, or a parsed document
        variables: Values for the variables of the operation
        operation_name: The operation to execute, if the document has several
        settings: Execution settings
        select: The context to fetch the root with. Root relationship selectors receive it as the parent context.

    Raises:
        exc.QueryError: the query is invalid. Nothing has been fetched.
        exc.CardinalityError: the data violates the cardinality of a relationship
        exc.FetchError: a data source has failed
    """
    document = graphql.parse(query) if isinstance(query, str) else query
    request = request_from_graphql_document(document, root, variables, operation_name=operation_name, settings=settings)
    return await execute_request(root, request, settings=settings, select=select)


async def execute_request(root: JoinType, request: Request, *, settings: ExecutionSettings = None, select: Any = None) -> dict[str, Any]:
    """ Execute a request that has already been built """
    results = await root.fetch(request, select, settings=settings)
    return results[0].value


def execute_sync(root: JoinType, query: Union[str, graphql.DocumentNode], variables: dict[str, Any] = None, **kwargs) -> dict[str, Any]:
    """ Execute a query, synchronously. Must not be called from a running event loop. See: execute() """
    return asyncio.run(execute(root, query, variables, **kwargs))
