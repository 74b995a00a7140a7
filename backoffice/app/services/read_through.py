"""
Read-through lookup: local database first, external service on a miss.

A local hit is terminal; the external service is only asked when the
local lookup returns nothing. External results are returned as they are
and never stored locally.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from backoffice.app.core.exceptions import ResourceNotFoundError
from backoffice.app.schemas.common import Source

logger = logging.getLogger(__name__)

Lookup = Callable[..., Awaitable[Optional[Any]]]


def is_miss(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict)) and len(value) == 0:
        return True
    return False


@dataclass
class Resolved:
    entity: Any
    source: Source


class ReadThroughResolver:
    """
    Resolve one entity (or one filtered collection) through two sources.

    Args:
        resource: Human readable resource name for messages
        local_lookup: Coroutine function querying the database
        external_lookup: Coroutine function querying the upstream service
    """

    def __init__(self, resource: str, local_lookup: Lookup, external_lookup: Lookup):
        self.resource = resource
        self.local_lookup = local_lookup
        self.external_lookup = external_lookup

    async def resolve(self, *key: Any, description: Optional[str] = None) -> Resolved:
        """
        Raises:
            ResourceNotFoundError: neither source has the record
            UpstreamError: the external service failed (not a plain miss)
        """
        local = await self.local_lookup(*key)
        if not is_miss(local):
            return Resolved(local, Source.LOCAL)

        remote = await self.external_lookup(*key)
        if not is_miss(remote):
            logger.info("%s %s served from the external service", self.resource, key)
            return Resolved(remote, Source.EXTERNAL)

        target = description or f"with ID '{key[-1]}'"
        raise ResourceNotFoundError(
            self.resource,
            key[-1],
            message=f"{self.resource} {target} not found in any source",
        )
