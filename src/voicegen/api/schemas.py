"""
API Request/Response Schemas.

Models:
    GenerateTTSRequest: Input schema for POST /api/generate-tts
    GenerateTTSResponse: Success body of POST /api/generate-tts
    ErrorResponse: Failure body shared by every endpoint

Example Request:
    {
        "text": "Welcome aboard.",
        "voice": "Coral",
        "vibe": "Eternal Optimist",
        "prompt": {
            "identity": "A professional speaker",
            "tone": "Professional and formal"
        }
    }

The text bound is not declared on the schema: an over-long text must come
back as 400 with the standard error body, which the service layer does.
"""
from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field


class GenerateTTSRequest(BaseModel):
    """
    generate-tts request body.

    Attributes:
        text: Text to speak (max 1003 characters, checked by the service).
        voice: Voice name, any case ("Coral", "coral").
        vibe: Vibe name, sent upstream unchanged.
        prompt: Ordered style attributes; key order is kept in the
            serialized instructions.
    """
    text: str = Field(..., description="Text to synthesize")
    voice: str = Field(..., description="Voice name (case-insensitive)")
    vibe: str = Field(..., description="Vibe name")
    prompt: Dict[str, Any] = Field(
        default_factory=dict,
        description="Style attributes such as identity, affect, tone",
    )


class GenerateParams(BaseModel):
    text: str
    voice: str
    vibe: str
    prompt: Dict[str, Any]


class GenerateTTSResponse(BaseModel):
    """
    Success body.

    Example:
        {
            "success": true,
            "audioUrl": "http://localhost:3000/audio/1a2b3c4d5e",
            "params": {"text": "...", "voice": "Coral", "vibe": "...", "prompt": {...}}
        }
    """
    success: bool = True
    audioUrl: str = Field(..., description="Proxy URL for the generated audio")
    params: GenerateParams


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    code: str | None = None
