"""
HTML front page.

GET / renders templates/index.html with the voices and vibes offered by the
upstream generator and the default prompt attributes. The page posts to
/api/generate-tts and plays the returned audio URL.
"""
from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from voicegen.api.dependencies import get_service_config

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

VOICES = [
    "Alloy", "Ash", "Ballad", "Coral", "Echo", "Fable",
    "Onyx", "Nova", "Sage", "Shimmer", "Verse",
]

VIBES = ["Santa", "True Crime Buff", "Old-Timey", "Robot", "Eternal Optimist"]

# Order matters: it is the order of the serialized instructions
DEFAULT_PROMPT = {
    "identity": "A professional speaker",
    "affect": "Authoritative and friendly, displaying a wise and measured tone",
    "tone": "Professional and formal, easy to understand and acceptable",
    "emotion": "Confident and inspiring, conveying messages clearly",
    "pronunciation": "Clear and precise, with good articulation",
    "pause": "Strategic pauses for emphasis and to give listeners time to digest key points",
}


@router.get("/", response_class=HTMLResponse)
def index(request: Request):
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "voices": VOICES,
            "vibes": VIBES,
            "default_prompt": DEFAULT_PROMPT,
            "max_text_length": get_service_config().validation.max_text_length,
        },
    )
