""" Data source: SqlAlchemy Core SELECT statements

The context is an `sa.sql.Select`: it decides which rows to fetch (FROM, JOIN, WHERE).
Columns are decided by the engine: the statement is executed with only the requested columns.

Example:
    Author = JoinType(
        name='Author',
        fields=lambda: {
            'id': column(author_table.c.id),
            'books': many(
                Book,
                lambda request, authors: select_children(authors, author_table.c.id, book_table, book_table.c.author_id),
                {'id': 'authorId'},
            ),
        },
        fetch_immediates=fetch_immediates_from_select(connection),
    )
"""

from __future__ import annotations

from collections import abc
from typing import Optional

import graphql
import sqlalchemy as sa

from graphjoiner.engine.fields import Field
from graphjoiner.request import Request
from graphjoiner.typing import RowDict


def column(col: sa.Column, type: graphql.GraphQLOutputType = None, **kwargs) -> Field:
    """ An immediate field that selects a column

    Args:
        col: The column to select
        type: GraphQL type. Default: guessed from the column type
    """
    return Field(type or graphql_type_for_column(col), attr=col.key, column=col, **kwargs)


def graphql_type_for_column(col: sa.Column) -> Optional[graphql.GraphQLScalarType]:
    """ Guess a GraphQL scalar type for a column

    Returns:
        The type, or None when there's no obvious choice
    """
    for sa_type, graphql_type in GRAPHQL_SCALAR_TYPES:
        if isinstance(col.type, sa_type):
            return graphql_type
    else:
        return None


# SqlAlchemy type => GraphQL type. The first match wins.
GRAPHQL_SCALAR_TYPES: list[tuple[type, graphql.GraphQLScalarType]] = [
    (sa.Boolean, graphql.GraphQLBoolean),
    (sa.Integer, graphql.GraphQLInt),
    (sa.Numeric, graphql.GraphQLFloat),
    (sa.Float, graphql.GraphQLFloat),
    (sa.String, graphql.GraphQLString),
]


def fetch_immediates_from_select(connection: sa.engine.Connection) -> abc.Callable[[list[Request], sa.sql.Select], list[RowDict]]:
    """ Make an immediate fetch callback that executes statements with this connection

    The connection is synchronous: every statement blocks the event loop while it runs.
    Sibling relationships are therefore fetched one after another, even with `concurrent_relationships`.
    """
    def fetch_immediates(selections: list[Request], select: sa.sql.Select) -> list[RowDict]:
        stmt = select_columns(select, selections)
        res = connection.execute(stmt)
        return rows_to_dicts(res, selections)
    return fetch_immediates


def select_columns(select: sa.sql.Select, selections: list[Request]) -> sa.sql.Select:
    """ Replace the columns of a statement with the selected ones

    Columns are labelled by position: keys are not necessarily strings, and user aliases must not matter here.
    Every record is a row, even when selected columns repeat: two books by the same author are two books.
    It is the selector that keeps records distinct, see select_children()
    """
    # Nothing to select: still, every record is a row
    if not selections:
        return select.with_only_columns(sa.literal(1).label('c'), maintain_column_froms=True)

    return select.with_only_columns(
        *(
            selection.field.column.label(f'c{i}')  # type: ignore[union-attr]
            for i, selection in enumerate(selections)
        ),
        maintain_column_froms=True,
    )


def rows_to_dicts(res: sa.engine.Result, selections: list[Request]) -> list[RowDict]:
    """ Convert result rows into dicts keyed by selection keys """
    return [
        {
            selection.key: row[i]
            for i, selection in enumerate(selections)
        }
        for row in res
    ]


def select_children(parent_select: sa.sql.Select, parent_column: sa.Column,
                    child_table: sa.sql.FromClause, child_column: sa.Column) -> sa.sql.Select:
    """ Select children of all parent rows, for a relationship selector

    The parent statement becomes a subquery of distinct join values, and children are joined to it.

    Example:
        select_children(authors_select, author_table.c.id, book_table, book_table.c.author_id)
        #-> SELECT ... FROM book JOIN (SELECT DISTINCT author.id FROM author WHERE ...) AS anon_1 ON book.author_id = anon_1.id
    """
    parents = (
        parent_select
        .with_only_columns(parent_column, maintain_column_froms=True)
        .distinct()
        .subquery()
    )

    return sa.select(child_table).select_from(
        child_table.join(parents, child_column == parents.c[parent_column.key])
    )
