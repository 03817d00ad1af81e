""" Integration with GraphQL: graphql-core """

# High-level APIs
from .request import request_from_graphql_document
from .schema import graphql_schema

# Lower-level APIs
from .request import request_from_graphql_ast, coerce_variables, RequestReader
from .schema import graphql_object_type, graphql_field, graphql_output_type
