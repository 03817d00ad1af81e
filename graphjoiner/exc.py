from __future__ import annotations

from collections import abc
from typing import Any, Optional


class BaseGraphjoinerException(Exception):
    pass


class SchemaDefinitionError(BaseGraphjoinerException):
    """ Join types are defined incorrectly

    Reported when field tables are generated: this is a programming error, not a user error
    """


class QueryError(BaseGraphjoinerException):
    """ Invalid query provided by the User

    Reported while the request tree is being built: no fetch has been made yet
    """


class UnknownFieldError(QueryError):
    """ Query mentioned a field that the type does not have """

    def __init__(self, type_name: str, field_name: str):
        self.type_name = type_name
        self.field_name = field_name

        super().__init__(f'Unknown field "{field_name}" on type "{type_name}"')


class UnknownDirectiveError(QueryError):
    """ Query used a directive other than @include and @skip """

    def __init__(self, directive_name: str):
        self.directive_name = directive_name

        super().__init__(f'Unknown directive "@{directive_name}"')


class UnknownFragmentError(QueryError):
    """ Query spread a fragment that is not defined in the document """

    def __init__(self, fragment_name: str):
        self.fragment_name = fragment_name

        super().__init__(f'Unknown fragment "{fragment_name}"')


class FragmentCycleError(QueryError):
    """ Query spread a fragment from within itself """

    def __init__(self, fragment_names: abc.Sequence[str]):
        self.fragment_names = tuple(fragment_names)

        super().__init__(f'Fragment cycle: {" -> ".join(self.fragment_names)}')


class InvalidArgumentError(QueryError):
    """ Argument value could not be coerced to the declared argument type """

    def __init__(self, field_name: str, message: str):
        self.field_name = field_name

        super().__init__(f'Invalid arguments for field "{field_name}": {message}')


class InvalidVariablesError(InvalidArgumentError):
    """ Variable values could not be coerced to the types that the operation declares """

    def __init__(self, operation_name: Optional[str], messages: abc.Sequence[str]):
        self.field_name = None
        self.operation_name = operation_name
        self.messages = list(messages)

        QueryError.__init__(self, f'Invalid variables for operation "{operation_name or "<anonymous>"}": {"; ".join(self.messages)}')


class QueryDepthError(QueryError):
    """ Query is nested deeper than allowed by the settings """

    def __init__(self, depth: int, max_depth: int):
        self.depth = depth
        self.max_depth = max_depth

        super().__init__(f'Query depth {depth} exceeds the maximum of {max_depth}')


class CardinalityError(BaseGraphjoinerException):
    """ Fetched data violates the cardinality of a relationship """


class MultipleResultsFound(CardinalityError):
    """ A single relationship has matched more than one child row """

    def __init__(self, relationship: Any, count: int):
        self.relationship = relationship
        self.count = count

        super().__init__(f'Single relationship {relationship!r} matched {count} rows')


class FetchError(BaseGraphjoinerException):
    """ A data source callback failed

    This class is used to augment other errors: the original one is available as `original` and `__cause__`
    """

    def __init__(self, load_path: tuple, original: BaseException):
        self.load_path = load_path
        self.original = original

        path = '.'.join(map(str, load_path)) or '<root>'
        super().__init__(f'Fetch failed at {path}: {original!r}')
