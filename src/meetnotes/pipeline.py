"""Recording → transcript → summary → store."""

import logging
from datetime import datetime
from pathlib import Path

from meetnotes.audio import AudioCapture
from meetnotes.cloud import PRICING_INFO, SUMMARIZATION_MODELS, CloudClient
from meetnotes.config import Config
from meetnotes.models import Meeting, StoredSummary, SummaryResult, TranscriptionResult
from meetnotes.ollama import INSTALL_INSTRUCTIONS as OLLAMA_INSTALL_INSTRUCTIONS
from meetnotes.ollama import OllamaClient
from meetnotes.store import MeetingStore
from meetnotes.summarizer import get_summarizers, summarize_with_fallback
from meetnotes.transcription import WhisperTranscriber, install_instructions

logger = logging.getLogger(__name__)


def get_transcriber(config: Config):
    """Cloud Whisper when in cloud mode with an API key, local whisper otherwise."""
    if config.ai_mode == "cloud" and config.has_api_key:
        return CloudClient.from_config(config)
    return WhisperTranscriber(
        models_dir=config.models_dir,
        model=config.whisper_model,
        language=config.language,
    )


def transcribe(audio_path: str, config: Config) -> TranscriptionResult:
    return get_transcriber(config).transcribe(audio_path)


def summarize_transcript(text: str, config: Config) -> tuple[SummaryResult, str]:
    """Summarize with the configured backend, falling back to the extractive one.

    Returns:
        Tuple of (result, backend name)
    """
    result, backend_name = summarize_with_fallback(text, get_summarizers(config))
    if config.verbose:
        logger.info(f"Summarized {len(text)} chars with {backend_name}")
    return result, backend_name


def save_transcript_file(transcript: TranscriptionResult, config: Config, stem: str) -> Path:
    """Write the transcript text under the transcripts directory."""
    config.transcripts_dir.mkdir(parents=True, exist_ok=True)
    path = config.transcripts_dir / f"{stem}.txt"
    path.write_text(transcript.text, encoding="utf-8")
    return path


def process_recording(
    audio_path: str,
    config: Config,
    store: MeetingStore,
    title: str = "",
    duration: float = 0.0,
) -> tuple[Meeting, StoredSummary]:
    """Transcribe and summarize a recording, persisting every step.

    The meeting's status tracks progress; any failure marks it "error"
    and is re-raised.

    Returns:
        Tuple of (final meeting, stored summary)
    """
    title = title or f"Meeting {datetime.now():%Y-%m-%d %H:%M}"
    meeting = store.create_meeting(
        title=title,
        duration=duration,
        audio_path=str(audio_path),
        status="transcribing",
    )

    try:
        transcript = transcribe(audio_path, config)
        transcript_path = save_transcript_file(transcript, config, Path(audio_path).stem)
        store.save_transcript(meeting.id, transcript)
        store.update_meeting(
            meeting.id,
            status="summarizing",
            transcript_path=str(transcript_path),
            duration=duration or transcript.duration,
        )

        result, backend_name = summarize_transcript(transcript.text, config)
        summary = store.save_summary(meeting.id, result, backend_name)
        meeting = store.update_meeting(meeting.id, status="complete")
    except Exception:
        logger.exception(f"Processing failed for meeting {meeting.id}")
        store.update_meeting(meeting.id, status="error")
        raise

    return meeting, summary


def system_status(config: Config, capture: AudioCapture | None = None) -> dict:
    """Availability of transcription and summarization for the configured mode."""
    capture = capture or AudioCapture()
    status = {
        "mode": config.ai_mode,
        "cloud_configured": config.has_api_key,
        "ffmpeg": capture.check_ffmpeg(),
    }

    if config.ai_mode == "cloud":
        configured = config.has_api_key
        status["transcription"] = {
            "available": configured,
            "instructions": "Using OpenAI Whisper API" if configured
            else "Set your OpenAI API key to enable transcription",
        }
        status["summarization"] = {
            "available": configured,
            "models": SUMMARIZATION_MODELS if configured else [],
            "instructions": "Using OpenAI GPT API" if configured
            else "Set your OpenAI API key to enable summarization",
        }
        status["pricing"] = PRICING_INFO
        return status

    transcriber = WhisperTranscriber(models_dir=config.models_dir)
    status["transcription"] = {
        "available": transcriber.is_available(),
        "instructions": install_instructions(),
    }

    if config.ai_mode == "extractive":
        status["summarization"] = {"available": True, "models": [], "instructions": ""}
    else:
        ollama = OllamaClient.from_config(config)
        available = ollama.is_available()
        status["summarization"] = {
            "available": available,
            "models": ollama.list_models() if available else [],
            "instructions": OLLAMA_INSTALL_INSTRUCTIONS,
        }
    status["audio_setup"] = capture.setup_instructions()
    return status
