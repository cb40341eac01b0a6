import logging
from typing import Dict, List, Protocol

logger = logging.getLogger(__name__)


class Revalidator(Protocol):
    async def invalidate_route(self, path: str) -> None:
        ...

    async def invalidate_tag(self, tag: str) -> None:
        ...


class RecordingRevalidator:
    """Keeps a log of every invalidation the service has issued.

    It holds no rendered content; forwarding to the hosting layer is done by
    ``UpstreamRevalidator``. On its own it only records and logs.
    """

    def __init__(self):
        self._invalidations: List[Dict[str, str]] = []

    async def invalidate_route(self, path: str) -> None:
        self._record("path", path)

    async def invalidate_tag(self, tag: str) -> None:
        self._record("tag", tag)

    def _record(self, kind: str, value: str):
        self._invalidations.append({"kind": kind, "value": value})
        logger.info(f"Recorded {kind} invalidation: {value}")

    def get_invalidations(self) -> List[Dict[str, str]]:
        return list(self._invalidations)

    def clear_invalidations(self):
        self._invalidations.clear()
