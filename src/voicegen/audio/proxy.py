"""
Streaming audio proxy.

Resolves an audio code to its upstream URL and relays the upstream bytes
to the client without buffering the whole file:

    code -> ResourceCache.get() -> streaming GET (browser User-Agent)
         -> chunks relayed one by one -> upstream response closed

Upstream chunks are forwarded as they arrive, in whatever sizes the
upstream delivers them; nothing waits for a fixed chunk size. The next
chunk is read only after the previous one has been handed to the ASGI
server, so a slow client slows the upstream read instead of growing
memory.

Failure Semantics:
    - Unknown code: NotFoundError before any network traffic.
    - Transport error or non-2xx before the first byte: UpstreamError.
    - Error after bytes were sent: logged, the stream ends early and the
      client keeps the partial body. Nothing is retried.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator

import httpx

from voicegen.audio.cache import ResourceCache
from voicegen.core.config import UpstreamConfig
from voicegen.core.errors import NotFoundError, UpstreamError
from voicegen.core.logging import debug, error, get_logger, info, success
from voicegen.core.metrics import metrics

_LOG = get_logger("voicegen.proxy")


@dataclass
class ProxiedAudio:
    """
    An open upstream response ready to be relayed.

    Attributes:
        code: Audio code being served.
        content_type: Upstream Content-Type, or the configured default.
        response: The streaming httpx response; closed by iter_bytes().
    """
    code: str
    content_type: str
    response: httpx.Response

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        sent = 0
        try:
            async for chunk in self.response.aiter_bytes():
                sent += len(chunk)
                yield chunk
        except httpx.HTTPError as e:
            # Headers and some bytes are already out; the client keeps what it got
            metrics.record_proxy("partial")
            error(_LOG, "proxy_stream_interrupted", code=self.code, bytes=sent, error=str(e))
            return
        finally:
            metrics.add_proxied_bytes(sent)
            await self.response.aclose()

        metrics.record_proxy("ok")
        success(_LOG, "proxy_done", code=self.code, bytes=sent)

    async def aclose(self) -> None:
        await self.response.aclose()


class AudioProxy:
    """Opens upstream streams for cached audio codes."""

    def __init__(self, cache: ResourceCache, client: httpx.AsyncClient, config: UpstreamConfig | None = None):
        self._cache = cache
        self._client = client
        self._config = config or UpstreamConfig()

    async def open(self, code: str) -> ProxiedAudio:
        """
        Resolve ``code`` and open the upstream stream.

        Raises:
            NotFoundError: If the code is not cached.
            UpstreamError: If the upstream cannot be reached or answers non-2xx.
        """
        try:
            url = self._cache.get(code)
        except NotFoundError:
            metrics.record_proxy("not_found")
            raise

        info(_LOG, "proxy_request", code=code)
        request = self._client.build_request(
            "GET",
            url,
            headers={"User-Agent": self._config.proxy_user_agent},
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            metrics.record_upstream("proxy", "transport_error")
            metrics.record_proxy("error")
            error(_LOG, "proxy_fetch_failed", code=code, error=str(e), error_type=type(e).__name__)
            raise UpstreamError("Error fetching audio file", details={"code": code, "cause": str(e)}) from e

        if not response.is_success:
            await response.aclose()
            metrics.record_upstream("proxy", "bad_status")
            metrics.record_proxy("error")
            error(_LOG, "proxy_fetch_failed", code=code, status=response.status_code)
            raise UpstreamError(
                "Error fetching audio file",
                details={"code": code, "status_code": response.status_code},
            )

        metrics.record_upstream("proxy", "ok")
        content_type = response.headers.get("content-type") or self._config.proxy_default_content_type
        debug(_LOG, "proxy_upstream_open", code=code, status=response.status_code, content_type=content_type)
        return ProxiedAudio(
            code=code,
            content_type=content_type,
            response=response,
        )
