"""
voicegen API Routes.

Endpoints:
    POST /api/generate-tts  - Generate speech, upload it, return a proxy URL
    GET  /audio/{code}      - Stream cached audio from its upstream URL
    GET  /health            - Health check with cache statistics
    GET  /metrics           - Prometheus metrics

Request Flow (generate-tts):
    1. Generate request ID for tracing
    2. GenerationService validates, generates, uploads, registers the code
    3. Audio URL is built from the scheme and Host of the incoming request
    4. JSON body {success, audioUrl, params}

Error Handling:
    All errors are returned as JSON:
    {
        "success": false,
        "error": "<human readable message>",
        "code": "<ERROR_CODE>"
    }

    HTTP status codes:
        - TEXT_TOO_LONG / INVALID_INPUT -> 400
        - NOT_FOUND -> 404
        - UPSTREAM_ERROR / INTERNAL_ERROR -> 500

Example Usage:
    >>> import httpx
    >>> r = httpx.post("http://localhost:3000/api/generate-tts", json={
    ...     "text": "Hello there", "voice": "Coral", "vibe": "Santa", "prompt": {}})
    >>> audio = httpx.get(r.json()["audioUrl"]).content
"""
from __future__ import annotations

import time
import uuid

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from voicegen import __version__
from voicegen.api.dependencies import get_audio_proxy, get_generation_service, get_resource_cache
from voicegen.api.schemas import ErrorResponse, GenerateTTSRequest, GenerateTTSResponse
from voicegen.audio.cache import ResourceCache
from voicegen.audio.proxy import AudioProxy
from voicegen.core.errors import ErrorCode, VoicegenError
from voicegen.core.logging import error, get_logger, set_request_id
from voicegen.core.metrics import metrics
from voicegen.services.generation import GenerateRequest, GenerationService

router = APIRouter()

_LOG = get_logger("voicegen.api")

_STARTED_AT = time.time()


def _new_request_id() -> str:
    rid = str(uuid.uuid4())[:12]
    set_request_id(rid)
    return rid


def _error_response(err: VoicegenError, rid: str) -> JSONResponse:
    return JSONResponse(
        status_code=err.status_code,
        content=err.to_dict(),
        headers={"X-Request-Id": rid},
    )


@router.post(
    "/api/generate-tts",
    response_model=GenerateTTSResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_tts(
    req: GenerateTTSRequest,
    request: Request,
    service: GenerationService = Depends(get_generation_service),
):
    """
    Generate speech and register it under a local audio code.

    Returns:
        200 {"success": true, "audioUrl": ..., "params": {...}}

    Raises:
        400: Text longer than 1003 characters (no upstream call is made)
        500: Speech generation or upload failed; message forwarded
    """
    rid = _new_request_id()

    host = request.headers.get("host") or request.url.netloc
    scheme = request.url.scheme

    try:
        result = await service.generate(
            GenerateRequest(text=req.text, voice=req.voice, vibe=req.vibe, prompt=req.prompt),
            scheme=scheme,
            host=host,
        )
    except VoicegenError as e:
        return _error_response(e, rid)
    except Exception as e:
        error(_LOG, "generate_unexpected_error", error=str(e), error_type=type(e).__name__)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": str(e) or "Internal server error",
                "code": ErrorCode.INTERNAL_ERROR,
            },
            headers={"X-Request-Id": rid},
        )

    return JSONResponse(content=result.to_dict(), headers={"X-Request-Id": rid})


@router.get(
    "/audio/{code}",
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_audio(code: str, proxy: AudioProxy = Depends(get_audio_proxy)):
    """
    Stream the audio registered under ``code``.

    The upstream Content-Type is relayed (audio/mpeg when absent) and bytes
    are forwarded chunk by chunk.
    """
    rid = _new_request_id()

    try:
        audio = await proxy.open(code)
    except VoicegenError as e:
        return _error_response(e, rid)

    return StreamingResponse(
        audio.iter_bytes(),
        media_type=audio.content_type,
        headers={"X-Request-Id": rid},
    )


@router.get("/health")
def health(cache: ResourceCache = Depends(get_resource_cache)):
    """
    Liveness/readiness probe.

    Returns:
        ok, version, uptime in seconds and cache statistics.
    """
    stats = cache.stats()
    metrics.set_cache_entries(int(stats["size"]))
    return {
        "ok": True,
        "version": __version__,
        "uptime_s": round(time.time() - _STARTED_AT, 1),
        "cache": stats,
    }


@router.get("/metrics")
def prometheus_metrics():
    """Prometheus text exposition of voicegen metrics."""
    content, content_type = metrics.get_metrics_response()
    return Response(content=content, media_type=content_type)
