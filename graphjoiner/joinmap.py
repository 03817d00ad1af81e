""" JoinMap: group values by their join values """

from __future__ import annotations

import collections
from collections import abc
from typing import Any, NamedTuple, Optional

from .typing import JoinValues


class Result(NamedTuple):
    """ A resolved row: its value, and the values of its join columns """
    value: Any
    join_values: JoinValues


class JoinMap:
    """ Given a list of results, provides `get(join_values)` that returns all values with the same join values

    All results, and the keys given to `get()`, must have join values of the same length.
    Equality is type-sensitive: ("1",) never matches (1,), and (1,) never matches (True,) or (1.0,).

    Example:
        m = JoinMap([
            Result('a', (1,)),
            Result('b', (2,)),
            Result('c', (2,)),
        ])
        m.get((2,))  #-> ['b', 'c']
    """

    def __init__(self, results: abc.Iterable[Result]):
        self._arity: Optional[int] = None
        self._groups: dict[tuple, list] = collections.defaultdict(list)

        for result in results:
            self._groups[self._key(result.join_values)].append(result.value)

    __slots__ = '_arity', '_groups'

    def get(self, join_values: abc.Sequence) -> list:
        """ Get all values that have these exact join values """
        values = self._groups.get(self._key(join_values))
        return list(values) if values else []

    def __len__(self):
        """ The number of values, in all groups """
        return sum(map(len, self._groups.values()))

    def _key(self, join_values: abc.Sequence) -> tuple:
        # Every key within one map has the same length
        if self._arity is None:
            self._arity = len(join_values)
        elif len(join_values) != self._arity:
            raise ValueError(f'Join values {tuple(join_values)!r} have length {len(join_values)}, expected {self._arity}')

        # Pair every value with its type: Python thinks that 1 == 1.0 == True, and hashes them equally
        return tuple((type(value), value) for value in join_values)
