"""
voicegen Services Layer.

Business logic between the API layer and the upstream clients.

Components:
    - generation.py: GenerationService (speech → upload → cache pipeline)
    - validators.py: Input validation functions
"""
from voicegen.core.errors import (
    ErrorCode,
    NotFoundError,
    UpstreamError,
    ValidationError,
    VoicegenError,
)

from .generation import (
    GenerateRequest,
    GenerateResult,
    GenerationService,
    StageResult,
    build_audio_url,
    validate_request,
)

__all__ = [
    "GenerationService",
    "GenerateRequest",
    "GenerateResult",
    "StageResult",
    "build_audio_url",
    "validate_request",
    "VoicegenError",
    "ValidationError",
    "NotFoundError",
    "UpstreamError",
    "ErrorCode",
]
