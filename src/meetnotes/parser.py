"""Load transcripts from plain text or whisper-style JSON files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def parse_text(file_path: str) -> tuple[str, dict[str, Any]]:
    """Parse a plain text transcript.

    Returns:
        Tuple of (file_contents, metadata_dict) with "format" and "chars"
    """
    with open(file_path, "r", encoding="utf-8") as f:
        contents = f.read()

    metadata: dict[str, Any] = {
        "format": "text",
        "chars": len(contents),
    }

    return contents, metadata


def parse_json(file_path: str) -> tuple[str, dict[str, Any]]:
    """Parse a whisper-style JSON transcript.

    Uses the top-level "text" field, or joins segments[].text when it is
    missing or empty.

    Raises:
        json.JSONDecodeError: If the file is not valid JSON
        ValueError: If the JSON has neither text nor segments
    """
    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Not a transcript object: {file_path}")

    segments = data.get("segments") or data.get("transcription") or []
    text = (data.get("text") or "").strip()
    if not text:
        text = " ".join(
            (seg.get("text") or "").strip() for seg in segments if isinstance(seg, dict)
        ).strip()

    if not text and not segments:
        raise ValueError(f"No transcript text in {file_path}")

    metadata: dict[str, Any] = {
        "format": "json",
        "chars": len(text),
        "segments": len(segments),
        "language": data.get("language", ""),
    }

    return text, metadata


def parse_file(file_path: str) -> tuple[str, dict[str, Any]]:
    """Auto-detect file format and parse accordingly.

    Supports:
    - .json files (whisper / transcription output)
    - .txt, .md, .markdown files (plain text)
    - Unknown extensions: tries JSON first, falls back to text

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    suffix = path.suffix.lower()

    if suffix == ".json":
        return parse_json(file_path)
    elif suffix in (".txt", ".md", ".markdown"):
        return parse_text(file_path)
    else:
        try:
            return parse_json(file_path)
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError):
            pass
        return parse_text(file_path)
