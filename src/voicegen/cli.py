"""
Command-Line Interface for voicegen.

Runs the HTTP service, or talks to the speech generator directly without a
server. Dry-run mode validates the input and prints the exact form fields
that would be sent upstream, without any network call.

Usage Examples:
    # Start the HTTP service (PORT env var overrides the configured port)
    voicegen --serve --host 0.0.0.0 --port 3000

    # Serverless generation, audio written to a file
    voicegen --text "Hello there" --voice Coral --vibe Santa --out hello.mp3

    # Positional text (same as --text)
    voicegen "Hello there" --out hello.mp3

    # Show the upstream request without sending it
    voicegen --text "Test" --prompt-file prompt.json --dry-run --json

    # Print the audio code a download URL maps to
    voicegen --code https://tmpfiles.org/dl/123/voicegen.mp3

Environment Variables:
    VOICEGEN_SETTINGS: Path to settings.yaml
    VOICEGEN_VOICE: Default voice
    VOICEGEN_VIBE: Default vibe
    PORT: Listen port for --serve
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

from voicegen.audio.codes import derive_code
from voicegen.audio.speech import SpeechClient
from voicegen.core.config import ServiceConfig, load_settings
from voicegen.core.errors import VoicegenError
from voicegen.core.logging import configure_logging, fail, get_logger, info, set_request_id
from voicegen.services.generation import GenerateRequest, validate_request

DEFAULT_VOICE = "Coral"
DEFAULT_VIBE = "Santa"


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Optional list of arguments (defaults to sys.argv).

    Returns:
        Parsed argument namespace with all CLI options.
    """
    parser = argparse.ArgumentParser(description="voicegen CLI (server and serverless generation)")

    # Server mode
    parser.add_argument("--serve", action="store_true", help="Run the HTTP service")
    parser.add_argument("--host", help="Bind address for --serve")
    parser.add_argument("--port", type=int, help="Listen port for --serve")

    # Input options
    parser.add_argument("text_pos", nargs="?", help="Text to speak (positional)")
    parser.add_argument("--text", help="Text to speak")
    parser.add_argument("--voice", help="Voice name (e.g. Coral)")
    parser.add_argument("--vibe", help="Vibe name (e.g. Santa)")
    parser.add_argument("--prompt-file", help="JSON file with the prompt attributes")

    # Output options
    parser.add_argument("--out", help="Write generated audio to this file")

    # Execution modes
    parser.add_argument("--code", metavar="URL", help="Print the audio code for a download URL")
    parser.add_argument("--dry-run", action="store_true",
                        help="Validate and show the upstream request without sending it")
    parser.add_argument("--json", action="store_true", help="Print JSON summary")

    return parser.parse_args(argv)


def _load_prompt(path: Optional[str]) -> Dict[str, Any]:
    """
    Read the prompt mapping from a JSON file.

    Raises:
        SystemExit: If the file does not hold a JSON object.
    """
    if not path:
        return {}
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise SystemExit("Prompt file must contain a JSON object.")
    return data


def _resolve_text(args: argparse.Namespace) -> str:
    text = args.text if args.text is not None else args.text_pos
    if not text:
        raise SystemExit("Provide --text or a positional text.")
    return text


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    config = ServiceConfig.from_settings(load_settings(os.getenv("VOICEGEN_SETTINGS", "config/settings.yaml")))
    host = args.host or config.server.host
    port = args.port or config.server.port
    uvicorn.run("voicegen.main:app", host=host, port=port, log_config=None)
    return 0


async def _generate(config: ServiceConfig, speech_request) -> bytes:
    # Imported here so --dry-run and --code never touch the HTTP stack
    from voicegen.api.dependencies import create_http_client

    async with create_http_client(config.upstream) as client:
        return await SpeechClient(client, config.upstream).generate(speech_request)


def _print_payload(payload: Dict[str, Any], as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, ensure_ascii=False))
    else:
        print(payload)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Orchestrates the CLI workflow:
        1. Parse arguments
        2. Handle --serve and --code (no generation request needed)
        3. Load settings and validate the request
        4. Dry-run: print the upstream form fields and stop
        5. Otherwise generate audio and write it to --out

    Args:
        argv: Optional list of command-line arguments.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = _parse_args(argv)

    if args.serve:
        return _serve(args)

    settings = load_settings(os.getenv("VOICEGEN_SETTINGS", "config/settings.yaml"))
    config = settings.get_service_config()

    if args.code:
        print(derive_code(args.code, config.cache.code_length))
        return 0

    # Initialize logging and set request ID for tracing
    configure_logging()
    log = get_logger("voicegen.cli")
    set_request_id(str(uuid4())[:12])

    request = GenerateRequest(
        text=_resolve_text(args),
        voice=args.voice or os.getenv("VOICEGEN_VOICE") or DEFAULT_VOICE,
        vibe=args.vibe or os.getenv("VOICEGEN_VIBE") or DEFAULT_VIBE,
        prompt=_load_prompt(args.prompt_file),
    )

    try:
        speech_request = validate_request(request, config.validation.max_text_length)
    except VoicegenError as e:
        fail(log, "invalid_request", code=e.code, error=e.message)
        _print_payload(e.to_dict(), args.json)
        return 2

    if args.dry_run:
        payload = {"ok": True, "dry_run": True, "fields": speech_request.form_fields()}
        _print_payload(payload, args.json)
        print("DRY_RUN_OK")
        return 0

    if not args.out:
        raise SystemExit("Provide --out to write generated audio (or use --dry-run).")

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    info(log, "generate_start", chars=len(speech_request.text), out=str(out_path))
    try:
        audio = asyncio.run(_generate(config, speech_request))
    except VoicegenError as e:
        fail(log, "generate_failed", code=e.code, error=e.message)
        _print_payload(e.to_dict(), args.json)
        return 1

    out_path.write_bytes(audio)
    _print_payload({"ok": True, "dry_run": False, "out": str(out_path), "bytes": len(audio)}, args.json)
    print("CLI_OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
