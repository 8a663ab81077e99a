"""
End-to-end API tests through FastAPI's TestClient.

Tests cover:
- POST /api/generate-tts success body and audio URL
- 400 on over-long text with zero upstream calls
- 500 on speech or upload failure, cache unchanged
- 422 {success: false, error, code} on a malformed body
- GET /audio/{code}: streamed bytes, Content-Type, 404, 500
- X-Request-Id header
"""
from conftest import AUDIO, DOWNLOAD_URL
from voicegen.audio.codes import derive_code
from voicegen.core.config import Defaults

BODY = {
    "text": "Hello there",
    "voice": "Coral",
    "vibe": "Santa",
    "prompt": {"identity": "x", "affect": "y"},
}


class TestGenerateTTS:
    """Tests for POST /api/generate-tts."""

    def test_success(self, api, upstream, cache):
        r = api.post("/api/generate-tts", json=BODY)
        assert r.status_code == 200

        code = derive_code(DOWNLOAD_URL)
        body = r.json()
        assert body == {
            "success": True,
            "audioUrl": f"http://testserver/audio/{code}",
            "params": BODY,
        }
        assert cache.get(code) == DOWNLOAD_URL
        assert r.headers["x-request-id"]

    def test_host_header_used(self, api):
        r = api.post("/api/generate-tts", json=BODY, headers={"host": "tts.example:8080"})
        assert r.json()["audioUrl"].startswith("http://tts.example:8080/audio/")

    def test_prompt_optional(self, api):
        body = {k: v for k, v in BODY.items() if k != "prompt"}
        r = api.post("/api/generate-tts", json=body)
        assert r.status_code == 200
        assert r.json()["params"]["prompt"] == {}

    def test_text_at_limit(self, api, upstream):
        r = api.post("/api/generate-tts", json={**BODY, "text": "a" * 1003})
        assert r.status_code == 200
        assert len(upstream.calls_to(Defaults.TTS_URL)) == 1
        assert len(upstream.calls_to(Defaults.UPLOAD_URL)) == 1

    def test_text_too_long(self, api, upstream, cache):
        r = api.post("/api/generate-tts", json={**BODY, "text": "a" * 1004})
        assert r.status_code == 400
        body = r.json()
        assert body["success"] is False
        assert body["error"] == "Text exceeds maximum length of 1003 characters"
        assert body["code"] == "TEXT_TOO_LONG"
        assert upstream.calls == []
        assert len(cache) == 0

    def test_speech_failure(self, api, upstream, cache):
        upstream.tts_status = 502
        r = api.post("/api/generate-tts", json=BODY)
        assert r.status_code == 500
        assert r.json() == {
            "success": False,
            "error": "Request failed with status code 502",
            "code": "UPSTREAM_ERROR",
        }
        assert len(cache) == 0

    def test_upload_failure(self, api, upstream, cache):
        upstream.upload_payload = {"status": "error"}
        r = api.post("/api/generate-tts", json=BODY)
        assert r.status_code == 500
        assert r.json()["success"] is False
        assert r.json()["error"] == "Failed to upload audio: Upload failed"
        assert len(cache) == 0

    def test_malformed_body(self, api, upstream):
        r = api.post("/api/generate-tts", json={"voice": "Coral"})
        assert r.status_code == 422
        body = r.json()
        assert body["success"] is False
        assert body["code"] == "INVALID_INPUT"
        assert body["error"].startswith("text:")
        assert r.headers["x-request-id"]
        assert upstream.calls == []

    def test_non_json_body(self, api, upstream):
        r = api.post("/api/generate-tts", content=b"not json", headers={"content-type": "application/json"})
        assert r.status_code == 422
        assert r.json()["success"] is False
        assert r.json()["code"] == "INVALID_INPUT"
        assert upstream.calls == []


class TestAudioProxyRoute:
    """Tests for GET /audio/{code}."""

    def test_round_trip(self, api, upstream):
        audio_url = api.post("/api/generate-tts", json=BODY).json()["audioUrl"]

        r = api.get(audio_url)
        assert r.status_code == 200
        assert r.content == AUDIO
        assert r.headers["content-type"] == "audio/mpeg"

        get = upstream.calls_to(DOWNLOAD_URL)[0]
        assert get.headers["user-agent"] == "Mozilla/5.0"

    def test_content_type_relayed(self, api, upstream, cache):
        upstream.download_content_type = "audio/ogg"
        code = derive_code(DOWNLOAD_URL)
        cache.put(code, DOWNLOAD_URL)

        r = api.get(f"/audio/{code}")
        assert r.headers["content-type"] == "audio/ogg"

    def test_content_type_default(self, api, upstream, cache):
        upstream.download_content_type = None
        code = derive_code(DOWNLOAD_URL)
        cache.put(code, DOWNLOAD_URL)

        r = api.get(f"/audio/{code}")
        assert r.status_code == 200
        assert r.headers["content-type"] == "audio/mpeg"
        assert r.content == AUDIO

    def test_unknown_code(self, api, upstream):
        r = api.get("/audio/0000000000")
        assert r.status_code == 404
        assert r.json() == {"success": False, "error": "Audio file not found", "code": "NOT_FOUND"}
        assert upstream.calls == []

    def test_upstream_failure(self, api, upstream, cache):
        upstream.download_status = 410
        code = derive_code(DOWNLOAD_URL)
        cache.put(code, DOWNLOAD_URL)

        r = api.get(f"/audio/{code}")
        assert r.status_code == 500
        assert r.json()["error"] == "Error fetching audio file"

    def test_repeat_requests_refetch(self, api, upstream, cache):
        """Audio bytes are never cached locally."""
        code = derive_code(DOWNLOAD_URL)
        cache.put(code, DOWNLOAD_URL)

        api.get(f"/audio/{code}")
        api.get(f"/audio/{code}")
        assert len(upstream.calls_to(Defaults.DOWNLOAD_PREFIX_TO)) == 2
