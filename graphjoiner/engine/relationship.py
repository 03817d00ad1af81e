""" Relationships: links between join types

A relationship fetches all children of all parent rows with one call, then matches children to parents
by comparing join values:

* The parent fetches its rows, and includes its join columns: ParentJoinKey(name)
* The relationship fetches the target type with an extra "join selection": ChildJoinKey(name)
* Children are grouped by these values in a JoinMap
* Every parent row looks its children up with its own join values
"""

from __future__ import annotations

import operator
from collections import abc
from enum import Enum
from functools import cached_property
from typing import Any, Optional, Union, TYPE_CHECKING

from graphjoiner import exc
from graphjoiner.joinmap import JoinMap, Result
from graphjoiner.request import Request, ParentJoinKey, ChildJoinKey, join_request
from graphjoiner.typing import LoadPath, RowDict, SelectCallable

from .fields import FieldDefinition, FieldKind, ArgumentsInput, invoke_callback
from .settings import ExecutionSettings, DEFAULT_SETTINGS


if TYPE_CHECKING:
    from .join_type import JoinType


class Cardinality(Enum):
    """ How many children a parent row has """
    ONE = 'one'
    MANY = 'many'


class Relationship(FieldDefinition):
    """ Relationship: a field that links to another join type

    Example:
        Relationship(
            target=Book,
            select=lambda request, authors: ...,
            cardinality=Cardinality.MANY,
            join={'id': 'authorId'},
        )

    See: single(), many()
    """
    kind = FieldKind.RELATIONSHIP

    # The type this relationship points to
    target: JoinType

    # Selector: (request, parent context) -> child context
    select: SelectCallable

    cardinality: Cardinality

    # Join pairs: (parent field name, child field name)
    # Empty: a cross join. Every child matches every parent. Only makes sense at the root.
    join: tuple[tuple[str, str], ...]

    def __init__(self, target: JoinType, select: SelectCallable, cardinality: Cardinality,
                 join: JoinInput = None, *, args: ArgumentsInput = None, description: str = None):
        super().__init__(args=args, description=description)
        self.target = target
        self.select = select
        self.cardinality = cardinality
        self.join = tuple(join.items() if isinstance(join, abc.Mapping) else join or ())

    def target_type(self) -> JoinType:
        return self.target

    @property
    def is_cross_join(self) -> bool:
        return not self.join

    @cached_property
    def parent_join_selections(self) -> tuple[Request, ...]:
        """ Join columns that the parent has to fetch for this relationship to find its children """
        assert self.parent is not None, f'{self!r} is not bound to any type'
        return tuple(
            join_request(_get_join_field(self.parent, parent_name, self), ParentJoinKey(parent_name))
            for parent_name, child_name in self.join
        )

    @cached_property
    def child_join_selections(self) -> tuple[Request, ...]:
        """ Join columns that the target has to fetch for its rows to be matched with the parents """
        return tuple(
            join_request(_get_join_field(self.target, child_name, self), ChildJoinKey(child_name))
            for parent_name, child_name in self.join
        )

    async def fetch(self, request: Request, select_parent: Any, *,
                    settings: ExecutionSettings = None,
                    load_path: LoadPath = (),
                    project: abc.Callable[[Any], Any] = None) -> RelationshipResults:
        """ Fetch children for all parents at once

        Args:
            request: The request for this relationship field. Its selections are fetched from the target.
            select_parent: The context that the parent has been fetched with
            settings: Execution settings of the parent level
            load_path: Path to the parent node
            project: Function to apply to every child value (used by extract())

        Returns:
            Grouped results. Use `get(parent_row)` to get the children of a parent row.

        Raises:
            exc.FetchError: the selector or a nested fetch has failed
        """
        settings = settings or DEFAULT_SETTINGS
        load_path = load_path + (request.key,)

        # The child has to select its join columns too: the parent will use them to find its children
        child_request = request.replace(join_selections=self.child_join_selections)

        # Get the context for the child
        select = await invoke_callback(self.select, load_path, request, select_parent)

        # Fetch the children. Once.
        results = await self.target.fetch(
            child_request,
            select,
            settings=settings.get_relationship_settings(self.name),  # type: ignore[arg-type]
            load_path=load_path,
        )

        return RelationshipResults(
            results,
            parent_join_keys=[selection.key for selection in self.parent_join_selections],
            process_results=self.process_results,
            project=project,
        )

    def process_results(self, values: list) -> Union[list, Any]:
        """ Apply cardinality to the list of matched children """
        if self.cardinality == Cardinality.MANY:
            return values

        # Single
        if len(values) == 0:
            return None
        elif len(values) == 1:
            return values[0]
        else:
            raise exc.MultipleResultsFound(self, len(values))


class RelationshipResults:
    """ Children of a relationship, grouped by their join values """

    def __init__(self, results: list[Result], *,
                 parent_join_keys: list,
                 process_results: abc.Callable[[list], Any],
                 project: abc.Callable[[Any], Any] = None):
        self._results = JoinMap(results)
        self._parent_join_keys = parent_join_keys
        self._process_results = process_results
        self._project = project

    __slots__ = '_results', '_parent_join_keys', '_process_results', '_project'

    def get(self, parent: RowDict) -> Any:
        """ Get children for a parent row """
        values = self._results.get(self._parent_join_values(parent))

        if self._project is not None:
            values = [self._project(value) for value in values]

        return self._process_results(values)

    def _parent_join_values(self, parent: RowDict) -> tuple:
        return tuple(parent[key] for key in self._parent_join_keys)


def single(target: JoinType, select: SelectCallable, join: JoinInput = None, **kwargs) -> Relationship:
    """ A relationship where every parent has at most one child

    Example:
        author = single(Author, select_authors_for_books, {'authorId': 'id'})
    """
    return Relationship(target, select, Cardinality.ONE, join, **kwargs)


def many(target: JoinType, select: SelectCallable, join: JoinInput = None, **kwargs) -> Relationship:
    """ A relationship where every parent has a list of children

    Example:
        books = many(Book, select_books_for_authors, {'id': 'authorId'})
    """
    return Relationship(target, select, Cardinality.MANY, join, **kwargs)


class Extract(FieldDefinition):
    """ A field of a relationship's target, exposed as a field of the current type

    It reuses the relationship: same selector, same join, same cardinality, and no additional fetch.

    Example:
        books = many(Book, ..., {'id': 'authorId'})
        bookTitles = extract(books, 'title')
        #-> ["Leave It to Psmith", "Right Ho, Jeeves"]
    """
    kind = FieldKind.EXTRACT

    def __init__(self, relationship: Relationship, field_name: str, *, description: str = None):
        super().__init__(description=description)
        self.relationship = relationship
        self.field_name = field_name

        # Arguments go to the relationship's selector
        self.args = relationship.args

    def bind(self, parent: JoinType, name: str):
        super().bind(parent, name)

        # The relationship may be used without being a field of its own
        if self.relationship.parent is None:
            self.relationship.bind(parent, name)

    @cached_property
    def field(self) -> FieldDefinition:
        """ The field that is extracted from the target """
        try:
            return self.relationship.target.fields()[self.field_name]
        except KeyError:
            raise exc.SchemaDefinitionError(
                f'{self!r} extracts an unknown field "{self.field_name}" of "{self.relationship.target.name}"'
            )

    def target_type(self) -> Optional[JoinType]:
        return self.field.target_type()

    @property
    def parent_join_selections(self) -> tuple[Request, ...]:
        return self.relationship.parent_join_selections

    @property
    def is_cross_join(self) -> bool:
        return self.relationship.is_cross_join

    async def fetch(self, request: Request, select_parent: Any, *,
                    settings: ExecutionSettings = None,
                    load_path: LoadPath = ()) -> RelationshipResults:
        """ Fetch the relationship, select only the extracted field """
        # Sub-selections of the extract field belong to the extracted field
        field_request = Request(
            field_name=self.field_name,
            key=self.field_name,
            field=self.field,
            selections=request.selections,
        )

        return await self.relationship.fetch(
            request.replace(field_name=self.relationship.name, field=self.relationship, selections=(field_request,)),
            select_parent,
            settings=settings,
            load_path=load_path,
            project=operator.itemgetter(self.field_name),
        )


def extract(relationship: Relationship, field_name: str, **kwargs) -> Extract:
    """ Expose a field of a relationship's target. See: Extract """
    return Extract(relationship, field_name, **kwargs)


def _get_join_field(join_type: JoinType, field_name: str, relationship: Relationship) -> FieldDefinition:
    """ Get a field that a relationship joins on """
    try:
        return join_type.fields()[field_name]
    except KeyError:
        raise exc.SchemaDefinitionError(
            f'{relationship!r} joins on an unknown field "{field_name}" of "{join_type.name}"'
        )


# Join pairs: { parent field name => child field name }, or a list of pairs
JoinInput = Optional[Union[abc.Mapping[str, str], abc.Iterable[tuple[str, str]]]]
