"""Interchangeable summarization backends and fallback selection."""

from __future__ import annotations

import logging
from typing import Protocol

from meetnotes import extractive
from meetnotes.cloud import CloudClient
from meetnotes.config import Config
from meetnotes.errors import SummarizationError
from meetnotes.models import SummaryResult
from meetnotes.ollama import OllamaClient

logger = logging.getLogger(__name__)


class Summarizer(Protocol):
    """Anything that turns a transcript into a SummaryResult."""

    name: str

    def summarize(self, text: str) -> SummaryResult:
        ...


class ExtractiveSummarizer:
    """Offline keyword/regex summarizer. Holds no state and never fails."""

    name = "local-extractive"

    def summarize(self, text: str) -> SummaryResult:
        return extractive.summarize(text)


def get_summarizers(config: Config) -> list[Summarizer]:
    """Backends to try for the configured AI mode, most preferred first.

    Cloud mode without an API key uses the local Ollama daemon instead. The
    extractive summarizer is always last so there is a result even when
    every network backend fails.
    """
    summarizers: list[Summarizer] = []
    if config.ai_mode == "cloud" and config.has_api_key:
        summarizers.append(CloudClient.from_config(config))
    elif config.ai_mode in ("cloud", "local"):
        summarizers.append(OllamaClient.from_config(config))
    summarizers.append(ExtractiveSummarizer())
    return summarizers


def get_summarizer(config: Config) -> Summarizer:
    """The preferred backend for the configured AI mode."""
    return get_summarizers(config)[0]


def summarize_with_fallback(
    text: str, summarizers: list[Summarizer]
) -> tuple[SummaryResult, str]:
    """Summarize with the first backend that succeeds.

    Args:
        text: Transcript to summarize
        summarizers: Backends in order of preference

    Returns:
        Tuple of (result, name of the backend that produced it)
    """
    for summarizer in summarizers:
        try:
            return summarizer.summarize(text), summarizer.name
        except SummarizationError as e:
            logger.warning("Summarizer %s failed: %s", summarizer.name, e)

    fallback = ExtractiveSummarizer()
    return fallback.summarize(text), fallback.name
