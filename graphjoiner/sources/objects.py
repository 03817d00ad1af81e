""" Data source: Python objects and dicts

The context is any iterable of records. Relationship selectors are expected to return records too.

Example:
    Book = JoinType(
        name='Book',
        fields=lambda: {
            'id': field(graphql.GraphQLInt),
            'title': field(graphql.GraphQLString),
        },
        fetch_immediates=fetch_immediates_from_objects,
    )
"""

from collections import abc
from typing import Any

import graphql

from graphjoiner.engine.fields import Field
from graphjoiner.request import Request
from graphjoiner.typing import RowDict


def field(type: graphql.GraphQLOutputType = None, attr: str = None, **kwargs) -> Field:
    """ An immediate field read from an attribute (or a dict key). Default: the field name """
    return Field(type, attr=attr, **kwargs)


def fetch_immediates_from_objects(selections: list[Request], objects: abc.Iterable[Any]) -> list[RowDict]:
    """ Read the selected fields from every record

    Records are assumed to be distinct: every one of them becomes a row.
    """
    return [
        {
            selection.key: read_attribute(obj, selection.field.attr)  # type: ignore[union-attr]
            for selection in selections
        }
        for obj in objects
    ]


def read_attribute(obj: Any, attr: str) -> Any:
    """ Read a dict key, or an object attribute """
    if isinstance(obj, abc.Mapping):
        return obj[attr]
    else:
        return getattr(obj, attr)
