import asyncio
import logging
from typing import List, Optional, Sequence

import async_timeout
import backoff
import httpx

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (httpx.RequestError, httpx.HTTPStatusError)


class UpstreamInvalidationError(Exception):
    def __init__(self, kind: str, value: str, failed_urls: List[str]):
        self.kind = kind
        self.value = value
        self.failed_urls = failed_urls
        super().__init__(
            f"Failed to invalidate {kind} {value!r} on {len(failed_urls)} upstream(s): "
            + ", ".join(failed_urls)
        )


def _log_retry(details):
    kind, value = details["args"][3]["kind"], details["args"][3]["value"]
    logger.warning(
        f"Retrying {kind} invalidation of {value} at {details['args'][2]} "
        f"(attempt {details['tries']}, next in {details['wait']:.2f}s)"
    )


class UpstreamRevalidator:
    """Tells the hosting layer which cached renders to drop.

    Each frontend host exposes a revalidation hook; an invalidation is a
    ``{"kind": "path"|"tag", "value": ...}`` JSON POST sent to every host at
    once. A host that keeps failing after retries, or a round that outlasts
    ``timeout``, raises ``UpstreamInvalidationError``.
    """

    def __init__(
        self,
        urls: Sequence[str],
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.urls = list(urls)
        self.timeout = timeout
        self._transport = transport

    async def invalidate_route(self, path: str) -> None:
        await self._broadcast("path", path)

    async def invalidate_tag(self, tag: str) -> None:
        await self._broadcast("tag", tag)

    @backoff.on_exception(
        backoff.expo,
        RETRYABLE_ERRORS,
        max_tries=5,
        jitter=backoff.full_jitter,
        on_backoff=_log_retry,
    )
    async def _send(self, client: httpx.AsyncClient, url: str, instruction: dict):
        response = await client.post(url, json=instruction)
        response.raise_for_status()
        logger.debug(f"{url} accepted {instruction['kind']} {instruction['value']} [{response.status_code}]")

    async def _broadcast(self, kind: str, value: str):
        if not self.urls:
            return

        instruction = {"kind": kind, "value": value}
        try:
            async with async_timeout.timeout(self.timeout):
                async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                    outcomes = await asyncio.gather(
                        *(self._send(client, url, instruction) for url in self.urls),
                        return_exceptions=True,
                    )
        except asyncio.TimeoutError:
            logger.error(f"Gave up on {kind} invalidation of {value}: no answer within {self.timeout}s")
            raise UpstreamInvalidationError(kind, value, list(self.urls))

        failed = []
        for url, outcome in zip(self.urls, outcomes):
            if isinstance(outcome, Exception):
                logger.error(f"{url} refused {kind} invalidation of {value}: {outcome}")
                failed.append(url)
        if failed:
            raise UpstreamInvalidationError(kind, value, failed)
        logger.info(f"Forwarded {kind} invalidation of {value} to {len(self.urls)} upstream(s)")


class CompositeRevalidator:
    def __init__(self, *revalidators):
        self.revalidators = list(revalidators)

    async def invalidate_route(self, path: str) -> None:
        for revalidator in self.revalidators:
            await revalidator.invalidate_route(path)

    async def invalidate_tag(self, tag: str) -> None:
        for revalidator in self.revalidators:
            await revalidator.invalidate_tag(tag)
