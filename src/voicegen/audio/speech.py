"""
Speech generation client.

Talks to the upstream generator (openai.fm by default). The request is a
multipart form with four fields:

    input   - text to speak
    prompt  - serialized style instructions (see utils.text.format_prompt)
    voice   - lower-cased voice name
    vibe    - vibe name, sent as given

A 2xx response body is the raw audio. Anything else, a transport error
or an empty body, is reported as a single UpstreamError.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

import httpx

from voicegen.core.config import UpstreamConfig
from voicegen.core.errors import UpstreamError
from voicegen.core.logging import debug, get_logger, warn
from voicegen.core.metrics import metrics
from voicegen.utils.text import format_prompt, normalize_voice

_LOG = get_logger("voicegen.speech")


@dataclass
class SpeechRequest:
    """
    Input for one generation call.

    Attributes:
        text: Text to speak.
        voice: Voice name; lower-cased on the wire.
        vibe: Vibe name, passed through unchanged.
        prompt: Ordered style attributes (identity, affect, tone, ...).
    """
    text: str
    voice: str
    vibe: str
    prompt: Dict[str, Any] = field(default_factory=dict)

    def form_fields(self) -> Dict[str, str]:
        return {
            "input": self.text,
            "prompt": format_prompt(self.prompt),
            "voice": normalize_voice(self.voice),
            "vibe": self.vibe,
        }


class SpeechClient:
    """
    Async client for the upstream speech generator.

    The httpx.AsyncClient is owned by the caller so one connection pool is
    shared across the app (see api/dependencies.py).
    """

    def __init__(self, client: httpx.AsyncClient, config: UpstreamConfig | None = None):
        self._client = client
        self._config = config or UpstreamConfig()

    @property
    def headers(self) -> Mapping[str, str]:
        return {
            "origin": self._config.tts_origin,
            "referer": self._config.tts_referer,
        }

    async def generate(self, request: SpeechRequest) -> bytes:
        """
        Generate audio for a request.

        Returns:
            Raw audio bytes exactly as the upstream returned them.

        Raises:
            UpstreamError: On transport failure, non-2xx status or empty body.
        """
        fields = request.form_fields()
        debug(_LOG, "tts_request", url=self._config.tts_url,
              voice=fields["voice"], vibe=fields["vibe"], prompt_chars=len(fields["prompt"]))

        # (None, value) parts make httpx send plain form fields as multipart
        files = {name: (None, value) for name, value in fields.items()}

        try:
            response = await self._client.post(self._config.tts_url, files=files, headers=self.headers)
        except httpx.HTTPError as e:
            metrics.record_upstream("tts", "transport_error")
            warn(_LOG, "tts_transport_error", error=str(e), error_type=type(e).__name__)
            raise UpstreamError(str(e) or type(e).__name__, details={"stage": "tts"}) from e

        if not response.is_success:
            metrics.record_upstream("tts", "bad_status")
            warn(_LOG, "tts_bad_status", status=response.status_code)
            raise UpstreamError(
                f"Request failed with status code {response.status_code}",
                details={"stage": "tts", "status_code": response.status_code},
            )

        audio = response.content
        if not audio:
            metrics.record_upstream("tts", "empty_body")
            raise UpstreamError("Speech generation returned no audio", details={"stage": "tts"})

        metrics.record_upstream("tts", "ok")
        debug(_LOG, "tts_response", status=response.status_code, bytes=len(audio),
              content_type=response.headers.get("content-type", "-"))
        return audio
