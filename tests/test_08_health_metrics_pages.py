"""
Tests for the ambient endpoints: /health, /metrics and the front page.
"""
from voicegen.core.metrics import VoicegenMetrics, metrics


class TestHealth:

    def test_health(self, api, cache):
        cache.put("abc", "https://tmpfiles.org/dl/1/voicegen.mp3")

        r = api.get("/health")
        assert r.status_code == 200
        j = r.json()
        assert j["ok"] is True
        assert "version" in j
        assert j["uptime_s"] >= 0
        assert j["cache"]["size"] == 1
        assert j["cache"]["eviction"] == "none"


class TestMetricsEndpoint:

    def test_metrics_exposed(self, api):
        api.post("/api/generate-tts", json={"text": "a" * 2000, "voice": "Coral", "vibe": "Santa"})

        r = api.get("/metrics")
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/plain")
        assert "voicegen_generate_requests_total" in r.text
        assert 'status="invalid"' in r.text

    def test_proxy_outcomes_counted(self, api):
        api.get("/audio/0000000000")
        r = api.get("/metrics")
        assert 'voicegen_proxy_requests_total{outcome="not_found"}' in r.text


class TestMetricsModule:
    """Recording never raises and shows up in the exposition."""

    def test_global_instance(self):
        assert isinstance(metrics, VoicegenMetrics)

    def test_separate_registries(self):
        first = VoicegenMetrics()
        second = VoicegenMetrics()
        first.record_upstream("tts", "ok")
        body, _ = second.get_metrics_response()
        assert b'target="tts"' not in body

    def test_record_all(self):
        m = VoicegenMetrics()
        m.record_generate("success", 1.2)
        m.record_upstream("upload", "ok")
        m.record_proxy("ok")
        m.add_proxied_bytes(1024)
        m.add_proxied_bytes(0)
        m.set_cache_entries(3)

        body, content_type = m.get_metrics_response()
        text = body.decode()
        assert "voicegen_proxied_bytes_total 1024.0" in text
        assert "voicegen_cache_entries 3.0" in text
        assert 'voicegen_upstream_calls_total{target="upload",outcome="ok"} 1.0' in text
        assert content_type.startswith("text/plain")


class TestIndexPage:

    def test_index(self, api):
        r = api.get("/")
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/html")
        assert "/api/generate-tts" in r.text
        assert '<option value="Coral">' in r.text
        assert 'maxlength="1003"' in r.text


class TestCors:

    def test_preflight(self, api):
        r = api.options(
            "/api/generate-tts",
            headers={
                "Origin": "http://frontend.example",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert r.status_code == 200
        assert r.headers["access-control-allow-origin"] in ("*", "http://frontend.example")
