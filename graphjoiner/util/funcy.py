from collections import abc
from functools import wraps
from typing import Any, TypeVar


T = TypeVar('T')


# Borrowed from: funcy
def collecting(func):
    """ Convert a generator to a list-returning function

    Example:
        @collecting
        def count():
            yield 1
            yield 2
            yield 3
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        return list(
            func(*args, **kwargs)
        )
    return wrapper


# Borrowed from: funcy
def partition(pred: abc.Callable[[T], bool], seq: abc.Iterable[T]) -> tuple[list[T], list[T]]:
    """ Split a sequence into two lists: items that pass the predicate, and items that don't

    Example:
        partition(lambda x: x > 1, [1, 2, 3])
        #-> [2, 3], [1]
    """
    passed: list[T] = []
    failed: list[T] = []
    for item in seq:
        (passed if pred(item) else failed).append(item)
    return passed, failed


@collecting
def unique_by(key: abc.Callable[[T], Any], seq: abc.Iterable[T]) -> abc.Iterator[T]:
    """ Drop items with a repeated key. The first one wins. Order is kept. """
    seen = set()
    for item in seq:
        k = key(item)
        if k not in seen:
            seen.add(k)
            yield item
