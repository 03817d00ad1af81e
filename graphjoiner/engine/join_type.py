""" JoinType: resolves requests against a type, one batched fetch per level

Overview:

* JoinType has a table of fields: immediate fields, relationships, extracts
* fetch() fetches immediate fields for all rows at once, using the injected `fetch_immediates()` callback
* Then every selected relationship fetches its children for all these rows at once, recursively
* Children are matched to parents by join values
"""

from __future__ import annotations

import asyncio
import logging
from collections import abc
from typing import Any, Optional, Union, TYPE_CHECKING

from graphjoiner import exc
from graphjoiner.joinmap import Result
from graphjoiner.request import Request
from graphjoiner.typing import FetchImmediatesCallable, LoadPath, RowDict
from graphjoiner.util.funcy import partition, unique_by

from .fields import FieldDefinition, FieldKind, invoke_callback
from .settings import ExecutionSettings, DEFAULT_SETTINGS


if TYPE_CHECKING:
    import graphql
    from .relationship import Relationship, Extract


logger = logging.getLogger(__name__)


class JoinType:
    """ A type that resolves its fields by joining

    Example:
        Author = JoinType(
            name='Author',
            fields=lambda: {
                'id': Field(graphql.GraphQLInt),
                'name': Field(graphql.GraphQLString),
                'books': many(Book, select_books, {'id': 'authorId'}),
            },
            fetch_immediates=fetch_immediates_from_objects,
        )

    Fields are given as a function: types refer to one another, so the table can only be built
    when all of them exist. It is generated on first use, once.
    """
    # Type name
    name: str

    # Immediate fetch callback: (selections, context) -> rows
    fetch_immediates: FetchImmediatesCallable

    description: Optional[str]

    def __init__(self, name: str,
                 fields: abc.Callable[[], abc.Mapping[str, FieldDefinition]],
                 fetch_immediates: FetchImmediatesCallable = None, *,
                 description: str = None):
        """
        Args:
            name: The name of the type
            fields: Function that generates the field table: { name => FieldDefinition }
            fetch_immediates: Function that fetches rows: (selections, context) -> rows.
                Every row must have a value for every `selection.key`. Rows must be distinct.
                Can be an `async def`, or return an awaitable.
        """
        self.name = name
        self.fetch_immediates = fetch_immediates  # type: ignore[assignment]
        self.description = description

        self._generate_fields = fields
        self._fields: Optional[dict[str, FieldDefinition]] = None
        self._generating_fields = False
        self._graphql_type: Optional[graphql.GraphQLObjectType] = None

    def fields(self) -> dict[str, FieldDefinition]:
        """ Get the field table

        Raises:
            exc.SchemaDefinitionError: field table generation is re-entered
        """
        if self._fields is None:
            # A generator function that asks for its own table would never finish
            if self._generating_fields:
                raise exc.SchemaDefinitionError(f'Fields of "{self.name}" requested while they are being generated')

            self._generating_fields = True
            try:
                fields = dict(self._generate_fields())
            finally:
                self._generating_fields = False

            # Bind: every field learns its name and owner
            for name, field in fields.items():
                field.bind(self, name)

            self._fields = fields
        return self._fields

    def get_field(self, name: str) -> FieldDefinition:
        """ Get a field by name

        Raises:
            exc.UnknownFieldError
        """
        try:
            return self.fields()[name]
        except KeyError:
            raise exc.UnknownFieldError(self.name, name)

    async def fetch(self, request: Request, select: Any, *,
                    settings: ExecutionSettings = None,
                    load_path: LoadPath = ()) -> list[Result]:
        """ Fetch rows for this type, including relationships

        This method would:
        1. Fetch immediate fields for all rows, plus the join columns relationships need
        2. Fetch every selected relationship, once, for all these rows
        3. Attach children to every row
        4. Return rows with their own join values: the enclosing relationship will use them

        Args:
            request: The request to resolve. `selections` are returned; `join_selections` are used for joining
            select: The context to fetch rows with. Given to `fetch_immediates()` and relationship selectors
            settings: Execution settings for this level
            load_path: Path to the enclosing relationship

        Returns:
            List of results: { value: dict, join_values: tuple }
        """
        settings = settings or DEFAULT_SETTINGS
        load_path = load_path + (self.name,)

        # Tell relationships and immediate fields apart
        selections = [
            selection if selection.field is not None else selection.replace(field=self.get_field(selection.field_name))  # type: ignore[arg-type]
            for selection in request.selections
        ]
        relationship_selections, immediate_selections = partition(_is_relationship, selections)

        # Immediate fields. Also, join columns: those that the enclosing relationship wants, and those our relationships want.
        fetched_selections = unique_by(
            lambda selection: selection.key,
            (
                *immediate_selections,
                *request.join_selections,
                *(join_selection
                  for selection in relationship_selections
                  for join_selection in selection.field.parent_join_selections),  # type: ignore[union-attr]
            )
        )

        # Fetch
        rows: list[RowDict] = [
            dict(row)  # mutable: we'll add relationships to it
            for row in await invoke_callback(self.fetch_immediates, load_path, fetched_selections, select, await_result=True)
        ]
        logger.debug(f'{_format_load_path(load_path)}: fetched {len(rows)} rows with {len(fetched_selections)} selections')

        # Fetch relationships & attach children
        async def load_relationship(selection: Request):
            field: Union[Relationship, Extract] = selection.field  # type: ignore[assignment]
            if field.is_cross_join and len(rows) > 1:
                logger.warning(f'{_format_load_path(load_path)}: cross join "{selection.key}" matches all of {len(rows)} parent rows')

            results = await field.fetch(selection, select, settings=settings, load_path=load_path)
            for row in rows:
                row[selection.key] = results.get(row)  # type: ignore[index]

        if settings.concurrent_relationships:
            await asyncio.gather(*(load_relationship(selection) for selection in relationship_selections))
        else:
            for selection in relationship_selections:
                await load_relationship(selection)

        # Results
        return [
            Result(
                value={selection.key: row[selection.key] for selection in selections},
                join_values=tuple(row[selection.key] for selection in request.join_selections),
            )
            for row in rows
        ]

    def to_graphql_type(self) -> graphql.GraphQLObjectType:
        """ Get a GraphQL type for this join type. See: integration.graphql.schema """
        if self._graphql_type is None:
            from graphjoiner.integration.graphql.schema import graphql_object_type
            self._graphql_type = graphql_object_type(self)
        return self._graphql_type

    def __repr__(self):
        return f'<{type(self).__name__} {self.name}>'


class RootJoinType(JoinType):
    """ The root type: the one that queries start at

    It has exactly one row, and no immediate fields of its own.
    Its relationships are usually cross joins: they have no join keys.

    Example:
        Root = RootJoinType(
            name='Query',
            fields=lambda: {
                'books': many(Book, lambda request, _: all_books),
            },
        )
    """

    def __init__(self, name: str, fields: abc.Callable[[], abc.Mapping[str, FieldDefinition]], *, description: str = None):
        super().__init__(name, fields, fetch_root_immediates, description=description)


def fetch_root_immediates(selections: list[Request], select: Any) -> list[RowDict]:
    """ The root has exactly one row """
    return [{}]


def _is_relationship(selection: Request) -> bool:
    return selection.field.kind is not FieldKind.IMMEDIATE  # type: ignore[union-attr]


def _format_load_path(load_path: LoadPath) -> str:
    return '.'.join(map(str, load_path))
