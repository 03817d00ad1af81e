""" Field definitions: what a join type is made of

Every field is one of:

* `Field`: an immediate field, read directly from the fetched row
* `Relationship`: a link to another join type, fetched with one batched query (see relationship.py)
* `Extract`: a field of a relationship's target, re-exposed on this type (see relationship.py)
"""

from __future__ import annotations

import inspect
from collections import abc
from enum import Enum
from typing import Any, Optional, Union, TYPE_CHECKING

import graphql

from graphjoiner import exc
from graphjoiner.typing import LoadPath


if TYPE_CHECKING:
    from .join_type import JoinType


class FieldKind(Enum):
    """ The kind of field: tells how it is resolved """
    IMMEDIATE = 'immediate'
    RELATIONSHIP = 'relationship'
    EXTRACT = 'extract'


class FieldDefinition:
    """ Base for all field definitions

    A field definition is created unbound: it only learns its name and the type it belongs to
    when the type generates its field table (see JoinType.fields())
    """
    kind: FieldKind

    # The type this field belongs to, and the name it has there
    parent: Optional[JoinType]
    name: Optional[str]

    # Declared arguments: { name => GraphQLArgument }
    args: dict[str, graphql.GraphQLArgument]

    description: Optional[str]

    def __init__(self, *, args: ArgumentsInput = None, description: str = None):
        self.parent = None
        self.name = None
        self.args = graphql_arguments(args)
        self.description = description

    def bind(self, parent: JoinType, name: str):
        """ Associate this field with the type that has it in its field table """
        if self.parent is not None and self.parent is not parent:
            raise exc.SchemaDefinitionError(
                f'Field "{name}" of "{parent.name}" is already used by "{self.parent.name}". Make another one.'
            )

        self.parent = parent
        self.name = name

    def target_type(self) -> Optional[JoinType]:
        """ Get the type that sub-selections of this field are resolved against """
        return None

    def __repr__(self):
        owner = self.parent.name if self.parent is not None else '?'
        return f'<{type(self).__name__} {owner}.{self.name}>'


class Field(FieldDefinition):
    """ Immediate field: a column or a property of the fetched record

    Example:
        Field(graphql.GraphQLString, attr='title')
    """
    kind = FieldKind.IMMEDIATE

    # GraphQL output type
    type: Optional[graphql.GraphQLOutputType]

    # Data source specific expression, e.g. an SqlAlchemy column
    column: Any

    def __init__(self, type: graphql.GraphQLOutputType = None, *, attr: str = None, column: Any = None,
                 args: ArgumentsInput = None, description: str = None):
        """
        Args:
            type: GraphQL output type
            attr: Name of the attribute (or dict key) to read. Default: the field name
            column: Data source specific expression, for data sources that need one
        """
        super().__init__(args=args, description=description)
        self.type = type
        self._attr = attr
        self.column = column

    @property
    def attr(self) -> Optional[str]:
        """ The attribute to read from a record """
        return self._attr or self.name


def graphql_arguments(args: ArgumentsInput) -> dict[str, graphql.GraphQLArgument]:
    """ Normalize argument definitions: input types are wrapped into GraphQLArgument

    Example:
        graphql_arguments({'id': graphql.GraphQLInt})
        #-> {'id': GraphQLArgument(GraphQLInt)}
    """
    return {
        name: arg if isinstance(arg, graphql.GraphQLArgument) else graphql.GraphQLArgument(arg)
        for name, arg in (args or {}).items()
    }


async def invoke_callback(callback: abc.Callable, load_path: LoadPath, *args, await_result: bool = False):
    """ Invoke a data source callback, await it if it's an `async def`

    Coroutine functions are always awaited. Other results are used as is, unless `await_result` is set:
    a context object that happens to be awaitable is not executed here, but rows can never be awaitable,
    so an immediate fetch that returns an awaitable is awaited.

    Args:
        await_result: Await the result if it is awaitable. Use for callbacks that return rows.

    Raises:
        exc.FetchError: the callback has failed
    """
    try:
        if _is_coroutine_function(callback):
            return await callback(*args)

        result = callback(*args)
        if await_result and inspect.isawaitable(result):
            result = await result
        return result
    except exc.BaseGraphjoinerException:
        raise
    except Exception as e:
        raise exc.FetchError(load_path, e) from e


def _is_coroutine_function(callback: abc.Callable) -> bool:
    return (
        inspect.iscoroutinefunction(callback) or
        inspect.iscoroutinefunction(getattr(callback, '__call__', None))
    )


# Argument definitions, as accepted by field constructors
ArgumentsInput = Optional[dict[str, Union[graphql.GraphQLArgument, graphql.GraphQLInputType]]]
