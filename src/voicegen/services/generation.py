"""
GenerationService - the speech generation pipeline.

Turns a generate-tts request into a locally addressable audio resource:

    Validate → Speech generation → Upload → Derive code → Cache put → Audio URL

Each upstream stage returns a StageResult instead of raising. The pipeline
walks the stages in order and stops at the first failed one, so a cache
entry is written only when speech generation and upload both succeeded
and the code was derived.

Error Handling:
    - ValidationError: text too long, raised before any network call
    - UpstreamError: speech generation or upload failed
    Both propagate to the API layer, which maps them to 400 / 500.

Example:
    >>> service = GenerationService(cache, speech_client, upload_client)
    >>> result = await service.generate(
    ...     GenerateRequest(text="Hello", voice="Coral", vibe="Santa",
    ...                     prompt={"identity": "A narrator"}),
    ...     scheme="http", host="localhost:3000",
    ... )
    >>> result.audio_url
    'http://localhost:3000/audio/1a2b3c4d5e'
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, Sequence, Tuple, TypeVar

from voicegen.audio.cache import ResourceCache
from voicegen.audio.codes import derive_code
from voicegen.audio.speech import SpeechClient, SpeechRequest
from voicegen.audio.upload import UploadClient
from voicegen.core.config import ServiceConfig
from voicegen.core.errors import UpstreamError, ValidationError, VoicegenError
from voicegen.core.logging import debug, fail, get_logger, info, success, verbose
from voicegen.core.metrics import metrics
from voicegen.services.validators import validate_name, validate_prompt, validate_text
from voicegen.utils.text import text_preview
from voicegen.utils.timeit import timeit

_LOG = get_logger("voicegen.service")

T = TypeVar("T")


# =============================================================================
# Request/Response Dataclasses
# =============================================================================

@dataclass
class GenerateRequest:
    """
    A generate-tts request as received from the client.

    Attributes:
        text: Text to speak (bounded by validation.max_text_length).
        voice: Voice name in any case.
        vibe: Vibe name.
        prompt: Ordered style attributes.
    """
    text: str
    voice: str
    vibe: str
    prompt: Dict[str, Any] = field(default_factory=dict)

    def params(self) -> Dict[str, Any]:
        """The inputs echoed back to the client, as received."""
        return {
            "text": self.text,
            "voice": self.voice,
            "vibe": self.vibe,
            "prompt": self.prompt,
        }


@dataclass
class GenerateResult:
    """
    Outcome of a successful pipeline run.

    Attributes:
        code: Opaque audio code now present in the cache.
        upstream_url: Direct-download URL the code resolves to.
        audio_url: Client-facing URL served by the audio proxy.
        params: Echo of the request inputs.
        audio_bytes: Size of the generated audio.
        timings: Per-stage durations in seconds.
    """
    code: str
    upstream_url: str
    audio_url: str
    params: Dict[str, Any]
    audio_bytes: int = 0
    timings: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "audioUrl": self.audio_url,
            "params": self.params,
        }


@dataclass
class StageResult(Generic[T]):
    """
    Success or failure of one pipeline stage.

    Exactly one of value / error is meaningful: ok=True carries value,
    ok=False carries error.
    """
    ok: bool
    value: Optional[T] = None
    error: Optional[VoicegenError] = None

    @classmethod
    def success(cls, value: T) -> "StageResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, err: VoicegenError) -> "StageResult[T]":
        return cls(ok=False, error=err)


def validate_request(request: GenerateRequest, max_text_length: int) -> SpeechRequest:
    """
    Check request bounds and build the upstream speech request.

    Raises:
        ValidationError: If the text is too long or a field has the wrong type.
    """
    return SpeechRequest(
        text=validate_text(request.text, max_text_length),
        voice=validate_name(request.voice, "voice"),
        vibe=validate_name(request.vibe, "vibe"),
        prompt=validate_prompt(request.prompt),
    )


def build_audio_url(scheme: str, host: str, code: str) -> str:
    """Client-facing URL for a code, on the host the client used to reach us."""
    return f"{scheme}://{host}/audio/{code}"


# =============================================================================
# Main Service Class
# =============================================================================

class GenerationService:
    """
    Orchestrates speech generation, upload and cache registration.

    The cache handle is shared with the audio proxy; this service is its
    only writer.
    """

    def __init__(
        self,
        cache: ResourceCache,
        speech: SpeechClient,
        uploader: UploadClient,
        config: Optional[ServiceConfig] = None,
    ):
        self._cache = cache
        self._speech = speech
        self._uploader = uploader
        self._config = config or ServiceConfig()

    @property
    def cache(self) -> ResourceCache:
        return self._cache

    @property
    def config(self) -> ServiceConfig:
        return self._config

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(self, request: GenerateRequest) -> SpeechRequest:
        return validate_request(request, self._config.validation.max_text_length)

    # =========================================================================
    # Stages
    # =========================================================================

    async def _stage_speech(self, speech_request: SpeechRequest) -> StageResult[bytes]:
        try:
            audio = await self._speech.generate(speech_request)
        except UpstreamError as e:
            return StageResult.failure(e)
        return StageResult.success(audio)

    async def _stage_upload(self, audio: bytes) -> StageResult[str]:
        upload = await self._uploader.upload(audio)
        if not upload.success:
            return StageResult.failure(
                UpstreamError(f"Failed to upload audio: {upload.error}", details={"stage": "upload"})
            )
        return StageResult.success(upload.url)

    async def _stage_register(self, upstream_url: str) -> StageResult[Tuple[str, str]]:
        code = derive_code(upstream_url, self._config.cache.code_length)
        self._cache.put(code, upstream_url)
        metrics.set_cache_entries(len(self._cache))
        return StageResult.success((code, upstream_url))

    def _stages(self) -> Sequence[Tuple[str, Callable[[Any], Awaitable[StageResult]]]]:
        return (
            ("tts", self._stage_speech),
            ("upload", self._stage_upload),
            ("register", self._stage_register),
        )

    # =========================================================================
    # Pipeline
    # =========================================================================

    async def generate(self, request: GenerateRequest, scheme: str, host: str) -> GenerateResult:
        """
        Run the full pipeline for one request.

        Args:
            request: Client inputs.
            scheme: Scheme of the incoming request ("http" / "https").
            host: Host header of the incoming request (may include a port).

        Returns:
            GenerateResult with the client-facing audio URL.

        Raises:
            ValidationError: Before any upstream call.
            UpstreamError: From the first failed stage; later stages never run.
        """
        timings: Dict[str, float] = {}
        preview_chars = self._config.logging.text_preview_chars

        info(_LOG, "generate_request", chars=len(request.text) if isinstance(request.text, str) else -1,
             voice=request.voice, vibe=request.vibe)

        with timeit("request_total") as total_t:
            try:
                speech_request = self.validate(request)
            except ValidationError:
                metrics.record_generate("invalid", 0.0)
                raise

            debug(_LOG, "generate_request_full",
                  text_preview=text_preview(speech_request.text, preview_chars),
                  prompt_keys=list(speech_request.prompt))

            value: Any = speech_request
            audio_bytes = 0
            for name, stage in self._stages():
                with timeit(name) as t:
                    result = await stage(value)
                timings[name] = t.seconds
                verbose(_LOG, "stage", event=name, ok=result.ok, seconds=round(t.seconds, 4))

                if not result.ok:
                    err = result.error or UpstreamError(f"{name} stage failed")
                    fail(_LOG, "generate_failed", stage=name, error=err.message)
                    metrics.record_generate("error", sum(timings.values()))
                    raise err

                if name == "tts":
                    audio_bytes = len(result.value)
                value = result.value

        code, upstream_url = value
        audio_url = build_audio_url(scheme, host, code)
        timings["total"] = total_t.seconds

        metrics.record_generate("success", timings["total"])
        success(_LOG, "generate_done", code=code, bytes=audio_bytes, seconds=round(timings["total"], 3))

        return GenerateResult(
            code=code,
            upstream_url=upstream_url,
            audio_url=audio_url,
            params=request.params(),
            audio_bytes=audio_bytes,
            timings=timings,
        )
