"""
Tests for the GenerationService pipeline.

Tests cover:
- Validation before any upstream call
- Speech -> upload -> register ordering
- Short-circuit on the first failed stage, cache untouched
- Audio URL built from scheme and host
- Params echoed as received
- StageResult helpers
"""
import asyncio

import pytest

from conftest import AUDIO, DOWNLOAD_URL
from voicegen.audio.codes import derive_code
from voicegen.audio.speech import SpeechClient
from voicegen.audio.upload import UploadClient
from voicegen.core.config import Defaults, ServiceConfig, Settings
from voicegen.core.errors import ErrorCode, UpstreamError, ValidationError
from voicegen.services.generation import (
    GenerateRequest,
    GenerationService,
    StageResult,
    build_audio_url,
)


@pytest.fixture
def service(http_client, cache):
    return GenerationService(cache, SpeechClient(http_client), UploadClient(http_client))


def _request(**overrides) -> GenerateRequest:
    values = dict(text="Hello there", voice="Coral", vibe="Santa", prompt={"identity": "x"})
    values.update(overrides)
    return GenerateRequest(**values)


class TestBuildAudioUrl:

    def test_with_port(self):
        assert build_audio_url("http", "localhost:3000", "abc") == "http://localhost:3000/audio/abc"

    def test_https(self):
        assert build_audio_url("https", "tts.example", "abc") == "https://tts.example/audio/abc"


class TestStageResult:

    def test_success(self):
        result = StageResult.success(b"x")
        assert result.ok and result.value == b"x" and result.error is None

    def test_failure(self):
        err = UpstreamError("boom")
        result = StageResult.failure(err)
        assert not result.ok and result.error is err


class TestGenerationService:
    """Tests for GenerationService.generate()."""

    def test_happy_path(self, service, upstream, cache):
        result = asyncio.run(service.generate(_request(), scheme="http", host="localhost:3000"))

        code = derive_code(DOWNLOAD_URL)
        assert result.code == code
        assert result.upstream_url == DOWNLOAD_URL
        assert result.audio_url == f"http://localhost:3000/audio/{code}"
        assert result.audio_bytes == len(AUDIO)
        assert cache.get(code) == DOWNLOAD_URL
        assert set(result.timings) == {"tts", "upload", "register", "total"}

    def test_stage_order(self, service, upstream):
        asyncio.run(service.generate(_request(), scheme="http", host="h"))
        assert [str(r.url) for r in upstream.calls] == [Defaults.TTS_URL, Defaults.UPLOAD_URL]

    def test_params_echo_inputs(self, service):
        result = asyncio.run(service.generate(_request(voice="CORAL"), scheme="http", host="h"))
        assert result.params == {
            "text": "Hello there",
            "voice": "CORAL",
            "vibe": "Santa",
            "prompt": {"identity": "x"},
        }
        assert result.to_dict() == {
            "success": True,
            "audioUrl": result.audio_url,
            "params": result.params,
        }

    def test_too_long_makes_no_upstream_call(self, service, upstream, cache):
        with pytest.raises(ValidationError) as exc:
            asyncio.run(service.generate(_request(text="a" * 1004), scheme="http", host="h"))
        assert exc.value.code == ErrorCode.TEXT_TOO_LONG
        assert upstream.calls == []
        assert len(cache) == 0

    def test_speech_failure_skips_upload(self, service, upstream, cache):
        upstream.tts_status = 500
        with pytest.raises(UpstreamError, match="status code 500"):
            asyncio.run(service.generate(_request(), scheme="http", host="h"))
        assert upstream.calls_to(Defaults.UPLOAD_URL) == []
        assert len(cache) == 0

    def test_upload_failure_leaves_cache_empty(self, service, upstream, cache):
        upstream.upload_payload = {"status": "error"}
        with pytest.raises(UpstreamError) as exc:
            asyncio.run(service.generate(_request(), scheme="http", host="h"))
        assert exc.value.message == "Failed to upload audio: Upload failed"
        assert len(cache) == 0

    def test_same_url_same_code(self, service, cache):
        first = asyncio.run(service.generate(_request(), scheme="http", host="h"))
        second = asyncio.run(service.generate(_request(text="Other"), scheme="http", host="h"))
        assert first.code == second.code
        assert len(cache) == 1

    def test_configured_limit(self, http_client, cache, upstream):
        config = ServiceConfig.from_settings(Settings(raw={"validation": {"max_text_length": 5}}))
        service = GenerationService(cache, SpeechClient(http_client), UploadClient(http_client), config)
        with pytest.raises(ValidationError, match="maximum length of 5"):
            asyncio.run(service.generate(_request(text="abcdef"), scheme="http", host="h"))
        assert upstream.calls == []
