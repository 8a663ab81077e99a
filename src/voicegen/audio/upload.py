"""
File host upload client.

Persists generated audio on the upstream file host (tmpfiles.org by
default) and returns a direct-download URL.

Direct-Download Rewrite:
    The host answers with a landing-page URL such as
        https://tmpfiles.org/12345/voicegen.mp3
    which serves HTML. The raw file lives under the /dl/ prefix:
        https://tmpfiles.org/dl/12345/voicegen.mp3
    rewrite_download_url() performs that single prefix substitution. The
    stored URL (and therefore the derived code) depends on it.

Unlike the speech client, upload() never raises: it reports failures in an
UploadResult so the caller decides how to surface them.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import httpx

from voicegen.core.config import Defaults, UpstreamConfig
from voicegen.core.logging import debug, get_logger, warn
from voicegen.core.metrics import metrics

_LOG = get_logger("voicegen.upload")


@dataclass
class UploadResult:
    """
    Outcome of an upload.

    Attributes:
        success: True when the host returned a usable URL.
        url: Direct-download URL (set on success).
        error: Failure message (set on failure).
    """
    success: bool
    url: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True, "url": self.url}
        return {"success": False, "error": self.error}


def rewrite_download_url(
    url: str,
    prefix_from: str = Defaults.DOWNLOAD_PREFIX_FROM,
    prefix_to: str = Defaults.DOWNLOAD_PREFIX_TO,
) -> str:
    """Replace the first occurrence of the landing prefix with the /dl/ prefix."""
    return url.replace(prefix_from, prefix_to, 1)


def _extract_url(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if not isinstance(data, dict):
        return None
    url = data.get("url")
    return url if isinstance(url, str) and url else None


class UploadClient:
    """Async multipart uploader for the file host."""

    def __init__(self, client: httpx.AsyncClient, config: UpstreamConfig | None = None):
        self._client = client
        self._config = config or UpstreamConfig()

    async def upload(self, audio: bytes, filename: Optional[str] = None) -> UploadResult:
        """
        Upload raw bytes.

        Args:
            audio: File content.
            filename: Suggested filename (default from config, "voicegen.mp3").

        Returns:
            UploadResult with the rewritten direct-download URL, or the
            failure message.
        """
        name = filename or self._config.upload_filename
        headers = {
            "accept": "*/*",
            "referer": self._config.upload_referer,
        }
        debug(_LOG, "upload_request", url=self._config.upload_url, bytes=len(audio), filename=name)

        try:
            response = await self._client.post(
                self._config.upload_url,
                files={"file": (name, audio)},
                headers=headers,
            )
        except httpx.HTTPError as e:
            metrics.record_upstream("upload", "transport_error")
            warn(_LOG, "upload_transport_error", error=str(e), error_type=type(e).__name__)
            return UploadResult(success=False, error=str(e) or type(e).__name__)

        if not response.is_success:
            metrics.record_upstream("upload", "bad_status")
            warn(_LOG, "upload_bad_status", status=response.status_code)
            return UploadResult(success=False, error=f"Request failed with status code {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            payload = None

        landing_url = _extract_url(payload)
        if landing_url is None:
            metrics.record_upstream("upload", "malformed")
            warn(_LOG, "upload_malformed_response", status=response.status_code)
            return UploadResult(success=False, error="Upload failed")

        url = rewrite_download_url(
            landing_url,
            self._config.download_prefix_from,
            self._config.download_prefix_to,
        )
        metrics.record_upstream("upload", "ok")
        debug(_LOG, "upload_response", landing_url=landing_url, url=url)
        return UploadResult(success=True, url=url)
