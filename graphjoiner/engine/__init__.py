""" The engine: resolve requests against join types

Overview:

* JoinType resolves a request: fetches immediate fields, then relationships, once per level
* Relationship fetches children for all parent rows at once and matches them by join values
* execute() is the high-level interface: query text in, result dict out
"""

from .settings import ExecutionSettings
from .fields import FieldKind, FieldDefinition, Field
from .relationship import Cardinality, Relationship, RelationshipResults, Extract
from .relationship import single, many, extract
from .join_type import JoinType, RootJoinType
from .execute import execute, execute_request, execute_sync
