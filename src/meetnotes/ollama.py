"""Summarization through a local Ollama daemon."""

from __future__ import annotations

import logging
import re

import requests

from meetnotes.config import Config
from meetnotes.errors import SummarizationError
from meetnotes.models import SummaryResult

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_MODEL = "llama3.2"

SUMMARY_PROMPT = """You are an AI meeting assistant. Analyze the following meeting transcript and provide a structured summary.

MEETING TRANSCRIPT:
{transcript}

Please provide your response in the following exact format:

## SUMMARY
[2-3 paragraph summary of the meeting]

## KEY POINTS
- [Key point 1]
- [Key point 2]
- [Key point 3]

## ACTION ITEMS
- [Action item 1 with owner if mentioned]
- [Action item 2 with owner if mentioned]

## DECISIONS MADE
- [Decision 1]
- [Decision 2]

If any section has no items, write "None identified."
"""

INSTALL_INSTRUCTIONS = """
Install Ollama:

Linux:
  curl -fsSL https://ollama.com/install.sh | sh

Windows:
  Download from https://ollama.com/download/windows

After installation, pull a model:
  ollama pull llama3.2

Or for smaller/faster models:
  ollama pull mistral
  ollama pull gemma2

Start Ollama service:
  ollama serve
"""

_SUMMARY_RE = re.compile(r"## SUMMARY\n([\s\S]*?)(?=## KEY POINTS|## ACTION|$)", re.I)
_KEY_POINTS_RE = re.compile(r"## KEY POINTS\n([\s\S]*?)(?=## ACTION|## DECISIONS|$)", re.I)
_ACTION_ITEMS_RE = re.compile(r"## ACTION ITEMS\n([\s\S]*?)(?=## DECISIONS|$)", re.I)
_DECISIONS_RE = re.compile(r"## DECISIONS MADE\n([\s\S]*?)$", re.I)
_BULLET_RE = re.compile(r"^[-•*]\s*")

_EMPTY_BULLETS = ("none identified.", "none")


def extract_bullet_points(text: str) -> list[str]:
    """Collect bullet lines, dropping placeholder bullets like "None identified."."""
    points = []
    for line in text.split("\n"):
        stripped = line.strip()
        if not stripped.startswith(("-", "•", "*")):
            continue
        point = _BULLET_RE.sub("", stripped).strip()
        if point and point.lower() not in _EMPTY_BULLETS:
            points.append(point)
    return points


def parse_summary_sections(response: str) -> SummaryResult:
    """Parse a markdown-sectioned reply into a SummaryResult.

    Falls back to the raw response as the summary when no SUMMARY section
    is present.
    """
    result = SummaryResult()

    match = _SUMMARY_RE.search(response)
    if match:
        result.summary = match.group(1).strip()

    match = _KEY_POINTS_RE.search(response)
    if match:
        result.key_points = extract_bullet_points(match.group(1))

    match = _ACTION_ITEMS_RE.search(response)
    if match:
        result.action_items = extract_bullet_points(match.group(1))

    match = _DECISIONS_RE.search(response)
    if match:
        result.decisions = extract_bullet_points(match.group(1))

    if not result.summary and response:
        result.summary = response

    return result


class OllamaClient:
    """HTTP client for the Ollama generate and tags endpoints."""

    name = "ollama"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        timeout: float = 300,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Config) -> OllamaClient:
        return cls(
            base_url=config.ollama_url,
            model=config.ollama_model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

    def _tags(self) -> list[dict]:
        resp = requests.get(f"{self.base_url}/api/tags", timeout=5)
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            return []
        return [m for m in data.get("models") or [] if isinstance(m, dict)]

    def is_available(self) -> bool:
        """True if the daemon answers and has at least one model pulled."""
        try:
            return len(self._tags()) > 0
        except (requests.RequestException, ValueError) as e:
            logger.debug("Ollama not available: %s", e)
            return False

    def list_models(self) -> list[str]:
        try:
            return [m.get("name", "") for m in self._tags()]
        except (requests.RequestException, ValueError) as e:
            logger.warning("Failed to get Ollama models: %s", e)
            return []

    def generate(self, prompt: str) -> str:
        """Run a non-streaming generation and return the response text.

        Raises:
            SummarizationError: If the daemon is unreachable or returns an error
        """
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            },
        }

        try:
            resp = requests.post(
                f"{self.base_url}/api/generate", json=payload, timeout=self.timeout
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error("Ollama generation failed: %s", e)
            raise SummarizationError(f"Failed to generate summary: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            return resp.text
        response = data.get("response", "") if isinstance(data, dict) else None
        if not isinstance(response, str):
            raise SummarizationError(f"Unexpected response from Ollama: {resp.text[:200]}")
        return response

    def summarize(self, text: str) -> SummaryResult:
        response = self.generate(SUMMARY_PROMPT.format(transcript=text))
        return parse_summary_sections(response)
