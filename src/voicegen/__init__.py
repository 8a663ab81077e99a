"""
voicegen: text-to-speech generation behind a caching audio proxy.

A request is forwarded to an upstream speech generator, the audio is
persisted on an upstream file host, and the client receives a stable
local URL (/audio/<code>) that never exposes the storage location.

Key Features:
    - POST /api/generate-tts: generate, upload and register audio
    - GET /audio/{code}: stream cached audio from upstream, chunk by chunk
    - Deterministic codes: the same upstream URL always maps to the same code
    - Structured logging, Prometheus metrics, YAML configuration

Example Usage:
    >>> from voicegen.audio.codes import derive_code
    >>> len(derive_code("https://tmpfiles.org/dl/1/voicegen.mp3"))
    10
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
