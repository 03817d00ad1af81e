from __future__ import annotations

from collections import abc
from typing import Any, Union, TYPE_CHECKING


if TYPE_CHECKING:
    from .request import Request, Key


# Context object that scopes a fetch: a SQL statement, a list of objects, anything the data source understands
SelectContext = Any

# A fetched row: a mapping from selection keys to values
RowDict = dict

# Tuple of join column values
JoinValues = tuple

# Load path: (type name, relationship key, type name, ...) path to the current node
# Examples:
# > ('Query',)
# > ('Query', 'books', 'Book')
# > ('Query', 'books', 'Book', 'author', 'Author')
LoadPath = tuple[Union[str, 'Key'], ...]

# Immediate fetch callback: (selections, context) -> rows
# May be an `async def`, or return an awaitable
FetchImmediatesCallable = abc.Callable[[list['Request'], SelectContext], Union[abc.Iterable[RowDict], abc.Awaitable[abc.Iterable[RowDict]]]]

# Relationship selector: (request, parent context) -> child context
# May be an `async def`
SelectCallable = abc.Callable[['Request', SelectContext], Any]
