""" Making queries with GraphQL """

from __future__ import annotations

from typing import Any

import graphql


async def graphql_query(schema: graphql.GraphQLSchema, query: str, context_value: Any = None, **variable_values):
    """ Make a GraphQL query, quick. Fail on errors. """
    res = await graphql.graphql(schema, query, variable_values=variable_values, context_value=context_value)

    # Raise errors as exceptions. Useful in unit-tests.
    if res.errors:
        # On error? raise it as it is
        if len(res.errors) == 1:
            raise res.errors[0]
        # Many errors? Raise as a list
        else:
            raise RuntimeError(res.errors)

    return res.data
