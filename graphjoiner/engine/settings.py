from __future__ import annotations

import dataclasses
from collections import abc
from typing import Optional, Union


@dataclasses.dataclass
class ExecutionSettings:
    """ Settings for query execution

    This object defines additional behavior that may be used with executions:
    limit query depth, control concurrency, configure nested levels, etc
    """
    # Fetch sibling relationships concurrently (asyncio.gather()), or one after another
    concurrent_relationships: bool = True

    # The max depth of a request tree. `None` means unlimited
    max_depth: Optional[int] = None

    # Settings for nested levels: i.e. relationships
    # A mapping { relationship name => ExecutionSettings }, where the value can optionally be a lambda
    relationships: Optional[dict[str, Union[ExecutionSettings, abc.Callable[[], ExecutionSettings]]]] = None

    def get_relationship_settings(self, relationship_name: str) -> ExecutionSettings:
        """ Callback that returns settings for a nested relationship

        Used by: Relationship.fetch() to get settings for the nested level

        Default behavior: use `self.relationships[name]`, fall back to `self`
        You can override this method for custom behavior
        """
        return _getitem_callable(self.relationships, relationship_name) or self


def _getitem_callable(d: Optional[dict], k: str):
    """ Get d[k] if possible. Resolve the value if its callable """
    if d is None:
        return None

    value = d.get(k)
    if callable(value):
        value = value()

    return value


# Default settings object
DEFAULT_SETTINGS = ExecutionSettings()
