""" Request: the internal representation of a query

A query is a tree of requests: every node says which field to resolve, under which key, with which arguments,
and which sub-fields to select from it.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Optional, Union, TYPE_CHECKING


if TYPE_CHECKING:
    from .engine.fields import FieldDefinition


@dataclass(frozen=True)
class ParentJoinKey:
    """ Key for a join column on the parent side: the value a parent row uses to find its children """
    field_name: str

    __slots__ = 'field_name',

    def __str__(self):
        return f'<parent join {self.field_name}>'


@dataclass(frozen=True)
class ChildJoinKey:
    """ Key for a join column on the child side: the value a child row uses to find its parent """
    field_name: str

    __slots__ = 'field_name',

    def __str__(self):
        return f'<child join {self.field_name}>'


# Output keys are strings. Join plumbing uses its own key types: they never compare equal to a string,
# so no alias chosen by the user can shadow a join column.
Key = Union[str, ParentJoinKey, ChildJoinKey]


@dataclass(frozen=True)
class Request:
    """ A node of the request tree

    Example:
        query { wodehouse: author(id: 1) { name } }
        =>
        Request(key=None, selections=(
            Request(field_name='author', key='wodehouse', args={'id': 1}, selections=(
                Request(field_name='name', key='name'),
            )),
        ))
    """
    # Name of the field on the parent type. `None` for the root request
    field_name: Optional[str] = None

    # Output key: the alias, or the field name
    key: Optional[Key] = None

    # Field definition that `field_name` refers to
    field: Optional[FieldDefinition] = None

    # Argument values, coerced
    args: dict[str, Any] = dataclasses.field(default_factory=dict)

    # Fields selected by the user
    selections: tuple[Request, ...] = ()

    # Fields selected because an enclosing relationship uses them as join columns.
    # They are fetched, but not exposed.
    join_selections: tuple[Request, ...] = ()

    def replace(self, **changes) -> Request:
        """ Get a copy of this request with some attributes replaced """
        return dataclasses.replace(self, **changes)


def join_request(field: FieldDefinition, key: Key) -> Request:
    """ Make a request for a join column """
    return Request(field_name=field.name, key=key, field=field)
