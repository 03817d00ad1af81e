from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version('graphjoiner')
except PackageNotFoundError:
    __version__ = '0.0.0'

from .engine import JoinType, RootJoinType
from .engine import Field, Relationship, Extract
from .engine import single, many, extract
from .engine import execute, execute_sync
from .engine import ExecutionSettings
from .joinmap import JoinMap
from .request import Request

from . import exc


# TODO: async data source for SqlAlchemy AsyncConnection.
#   sources.sa_select runs statements on a sync Connection: it blocks the event loop, and concurrent relationships run one by one.
