"""OpenAI-backed transcription (Whisper) and summarization (chat completions)."""

import json
import logging
from pathlib import Path

import openai
from pydantic import ValidationError

from meetnotes.config import DEFAULT_SUMMARY_PROMPT, DEFAULT_SYSTEM_PROMPT, Config
from meetnotes.errors import SummarizationError, TranscriptionError
from meetnotes.models import SummaryResult, TranscriptionResult, TranscriptSegment

logger = logging.getLogger(__name__)

TRANSCRIPTION_MODELS = ["whisper-1"]
SUMMARIZATION_MODELS = ["gpt-4o-mini", "gpt-4o", "gpt-3.5-turbo"]

NOT_CONFIGURED_MESSAGE = "CloudAI not initialized. Please set your API key in Settings."

PRICING_INFO = """
OpenAI API Pricing (approximate):

Whisper Transcription:
  • $0.006 per minute of audio

GPT-4o-mini Summarization:
  • ~$0.01 per meeting summary

Example: A 30-minute meeting costs approximately:
  • Transcription: $0.18
  • Summary: $0.01
  • Total: ~$0.19

Get your API key at: https://platform.openai.com/api-keys
"""


def validate_api_key(api_key: str) -> bool:
    """Check an API key by listing models with it."""
    try:
        openai.OpenAI(api_key=api_key).models.list()
        return True
    except openai.OpenAIError as e:
        logger.warning(f"API key validation failed: {e}")
        return False


def parse_summary_json(text: str) -> SummaryResult:
    """Parse a JSON summary reply; fall back to the raw text as the summary.

    Raises:
        SummarizationError: If the reply is a JSON object with fields of the wrong type
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return SummaryResult(summary=text)
    if not isinstance(data, dict):
        return SummaryResult(summary=text)

    try:
        return SummaryResult(
            summary=data.get("summary") or "",
            key_points=data.get("keyPoints") or [],
            action_items=data.get("actionItems") or [],
            decisions=data.get("decisions") or [],
        )
    except ValidationError as e:
        raise SummarizationError(f"Malformed summary reply: {e}") from e


class CloudClient:
    """OpenAI API client for transcription and summarization."""

    name = "cloud"

    def __init__(
        self,
        api_key: str,
        transcription_model: str = "whisper-1",
        summarization_model: str = "gpt-4o-mini",
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        summary_prompt: str = DEFAULT_SUMMARY_PROMPT,
    ):
        self.client = openai.OpenAI(api_key=api_key) if api_key else None
        self.transcription_model = transcription_model
        self.summarization_model = summarization_model
        self.system_prompt = system_prompt
        self.summary_prompt = summary_prompt

    @classmethod
    def from_config(cls, config: Config) -> "CloudClient":
        return cls(
            api_key=config.openai_api_key,
            transcription_model=config.transcription_model,
            summarization_model=config.summarization_model,
            system_prompt=config.system_prompt,
            summary_prompt=config.summary_prompt,
        )

    def is_configured(self) -> bool:
        return self.client is not None

    def transcribe(self, audio_path: str) -> TranscriptionResult:
        """Transcribe an audio file with the Whisper API.

        Args:
            audio_path: Path to the recording

        Returns:
            TranscriptionResult with segment timings

        Raises:
            TranscriptionError: If the client is not configured or the API call fails
            FileNotFoundError: If the audio file doesn't exist
        """
        if self.client is None:
            raise TranscriptionError(NOT_CONFIGURED_MESSAGE)

        path = Path(audio_path)
        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {audio_path}")

        try:
            with open(path, "rb") as audio_file:
                response = self.client.audio.transcriptions.create(
                    file=audio_file,
                    model=self.transcription_model,
                    response_format="verbose_json",
                    timestamp_granularities=["segment"],
                )
        except openai.OpenAIError as e:
            logger.error(f"Transcription error: {e}")
            raise TranscriptionError(f"Transcription failed: {e}") from e

        segments = [
            TranscriptSegment(
                id=idx,
                start=getattr(seg, "start", 0) or 0,
                end=getattr(seg, "end", 0) or 0,
                text=(getattr(seg, "text", "") or "").strip(),
            )
            for idx, seg in enumerate(getattr(response, "segments", None) or [])
        ]

        return TranscriptionResult(
            text=response.text,
            segments=segments,
            language=getattr(response, "language", None) or "en",
            duration=getattr(response, "duration", None) or 0,
        )

    def summarize(self, text: str) -> SummaryResult:
        """Summarize a transcript with a chat completion.

        Raises:
            SummarizationError: If the client is not configured or the API call fails
        """
        if self.client is None:
            raise SummarizationError(NOT_CONFIGURED_MESSAGE)

        try:
            completion = self.client.chat.completions.create(
                model=self.summarization_model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": self.summary_prompt.format(transcript=text)},
                ],
                temperature=0.7,
                max_tokens=2000,
            )
        except openai.OpenAIError as e:
            logger.error(f"Summarization error: {e}")
            raise SummarizationError(f"Summarization failed: {e}") from e

        content = completion.choices[0].message.content or ""
        return parse_summary_json(content)
