""" Tools for testing """

from .call_counter import counting_calls
from .query_logger import QueryCounter, QueryLogger, ExpectedQueryCounter
from .recreate_tables import created_tables, insert
from .graphql import graphql_query
