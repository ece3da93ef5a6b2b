"""Async HTTP transport built on httpx."""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from dataprivacy.errors import EmptyResponseError, TransportError

logger = logging.getLogger("dataprivacy.transport")


class HttpTransport:
    """Issues single best-effort requests and returns the response text.

    No retries and no timeout of our own: httpx's defaults apply unless
    the host passes a ``timeout``. ``transport`` lets callers plug in any
    ``httpx.AsyncBaseTransport`` (e.g. ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self._transport = transport
        self._timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        kwargs = {"transport": self._transport}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout
        return httpx.AsyncClient(**kwargs)

    async def get(
        self,
        url: str,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> str:
        return await self._send("GET", url, params=params, headers=headers)

    async def post_json(
        self,
        url: str,
        payload: dict,
        headers: Optional[dict] = None,
    ) -> str:
        return await self._send("POST", url, json=payload, headers=headers)

    async def _send(self, method: str, url: str, **kwargs) -> str:
        logger.debug("%s %s", method, url)
        try:
            async with self._client() as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out: {e}", url=url) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Cannot connect: {e}", url=url) from e
        except httpx.InvalidURL as e:
            raise TransportError(f"Invalid URL: {e}", url=url) from e

        final_url = str(response.request.url)
        text = response.text
        if not response.is_success:
            raise TransportError(
                f"HTTP {response.status_code} {response.reason_phrase}".rstrip(),
                url=final_url,
                status_code=response.status_code,
                body=text,
            )
        if not text:
            raise EmptyResponseError(url=final_url, status_code=response.status_code)
        return text
