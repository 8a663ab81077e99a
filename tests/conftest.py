"""
Shared fixtures.

FakeUpstream stands in for the three external collaborators (speech
generator, file host, audio download host) behind an httpx.MockTransport,
so no test ever leaves the process.
"""
from __future__ import annotations

import asyncio
import re
from typing import Dict, List, Optional

import httpx
import pytest

from voicegen.audio.cache import ResourceCache
from voicegen.core.config import Defaults

AUDIO = b"ID3\x04\x00fake-mp3-frames" * 64
LANDING_URL = "https://tmpfiles.org/12345/voicegen.mp3"
DOWNLOAD_URL = "https://tmpfiles.org/dl/12345/voicegen.mp3"


def parse_multipart(request: httpx.Request) -> Dict[str, bytes]:
    """Split a multipart/form-data body into {field name: raw value}."""
    boundary = request.headers["content-type"].split("boundary=")[1].encode()
    fields: Dict[str, bytes] = {}
    for part in request.content.split(b"--" + boundary):
        head, sep, body = part.partition(b"\r\n\r\n")
        if not sep:
            continue
        m = re.search(rb'name="([^"]+)"', head)
        if not m:
            continue
        fields[m.group(1).decode()] = body[:-2] if body.endswith(b"\r\n") else body
    return fields


class FakeUpstream:
    """Configurable MockTransport handler recording every request it sees."""

    def __init__(self):
        self.audio = AUDIO
        self.tts_status = 200
        self.upload_status = 200
        self.upload_payload: Optional[dict] = {"status": "success", "data": {"url": LANDING_URL}}
        self.download_status = 200
        self.download_content_type: Optional[str] = "audio/mpeg"
        self.calls: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        url = str(request.url)

        if url == Defaults.TTS_URL:
            return httpx.Response(self.tts_status, content=self.audio if self.tts_status < 400 else b"")

        if url == Defaults.UPLOAD_URL:
            if self.upload_payload is None:
                return httpx.Response(self.upload_status, content=b"not json")
            return httpx.Response(self.upload_status, json=self.upload_payload)

        if url.startswith(Defaults.DOWNLOAD_PREFIX_TO):
            headers = {}
            if self.download_content_type:
                headers["content-type"] = self.download_content_type
            return httpx.Response(self.download_status, content=self.audio, headers=headers)

        return httpx.Response(404)

    def calls_to(self, url: str) -> List[httpx.Request]:
        return [r for r in self.calls if str(r.url).startswith(url)]


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def http_client(upstream):
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    yield client
    asyncio.run(client.aclose())


@pytest.fixture
def cache() -> ResourceCache:
    return ResourceCache()


@pytest.fixture
def api(http_client, cache):
    """TestClient whose upstream client and cache are the fixtures above."""
    from fastapi.testclient import TestClient

    from voicegen.api.dependencies import get_http_client, get_resource_cache
    from voicegen.main import create_app

    app = create_app()
    app.dependency_overrides[get_http_client] = lambda: http_client
    app.dependency_overrides[get_resource_cache] = lambda: cache
    with TestClient(app) as c:
        yield c
