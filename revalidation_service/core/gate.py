import logging
import time
from functools import wraps
from typing import Callable, Optional

from revalidation_service.core.revalidators import Revalidator
from revalidation_service.core.security import InvalidSecretError, secrets_match
from revalidation_service.models.schemas import ChangedDocument, RevalidationResult

logger = logging.getLogger(__name__)


def log_revalidation(func):
    @wraps(func)
    async def wrapper(*args, **kwargs):
        start = time.time()
        try:
            result = await func(*args, **kwargs)
            logger.info(f"Revalidation completed in {time.time() - start:.3f}s")
            return result
        except Exception as e:
            logger.error(f"Revalidation failed after {time.time() - start:.3f}s: {e}", exc_info=True)
            raise
    return wrapper


class RevalidationGate:
    """Authenticates content webhooks and invalidates the cached resume page.

    The invalidated targets are fixed at construction: every authorized call
    drops the same route path and content tag, whichever document changed.
    Callers must ``authorize`` before ``invalidate``; ``revalidate`` does both.
    """

    def __init__(
        self,
        secret: Optional[str],
        revalidator: Revalidator,
        path: str = "/",
        tag: str = "resume",
        clock: Callable[[], float] = time.time,
    ):
        self._secret = secret
        self.revalidator = revalidator
        self.path = path
        self.tag = tag
        self._clock = clock

    def authorize(self, secret: Optional[str]):
        if not self._secret:
            logger.warning("Rejected revalidation: no secret configured on the server")
            raise InvalidSecretError()
        if not secrets_match(secret, self._secret):
            logger.warning("Rejected revalidation: missing or mismatched secret")
            raise InvalidSecretError()

    @log_revalidation
    async def invalidate(self, document: Optional[ChangedDocument] = None) -> RevalidationResult:
        if document is not None:
            logger.info(f"Webhook reported change to {document.describe()}")

        await self.revalidator.invalidate_route(self.path)
        await self.revalidator.invalidate_tag(self.tag)
        logger.info(f"Revalidated path={self.path} tag={self.tag}")

        return RevalidationResult(revalidated=True, now=int(self._clock() * 1000))

    async def revalidate(
        self, secret: Optional[str], document: Optional[ChangedDocument] = None
    ) -> RevalidationResult:
        self.authorize(secret)
        return await self.invalidate(document)
