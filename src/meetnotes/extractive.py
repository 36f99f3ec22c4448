"""Extractive summarization of meeting transcripts.

Selects existing sentences instead of generating new text: sentences are
scored by keyword hits, position, length, and digits; action items and
decisions are picked out by regex. Pure functions, no I/O, safe to call
from any number of threads.
"""

import math
import re

from meetnotes.models import SummaryResult

NO_CONTENT_SUMMARY = "No content to summarize."

MIN_SENTENCE_LENGTH = 10
MAX_KEY_POINTS = 5
MAX_ACTION_ITEMS = 10
MAX_DECISIONS = 5
MAX_SUMMARY_SENTENCES = 5
SUMMARY_RATIO = 0.3

IMPORTANT_KEYWORDS = (
    "important", "critical", "key", "main", "primary", "essential",
    "must", "should", "need", "require", "deadline", "goal",
    "decision", "agreed", "concluded", "result", "outcome",
    "next step", "action item", "follow up", "priority",
)

ACTION_PATTERNS = [
    re.compile(r"\b(will|going to|need to|have to|should|must|plan to)\s+\w+", re.I | re.A),
    re.compile(r"\b(action item|task|todo|follow up|next step)", re.I | re.A),
    re.compile(r"\b(assign|responsible|owner|deadline|by [a-z]+ \d+)", re.I | re.A),
    re.compile(r"\b(please|can you|could you|would you)\s+\w+", re.I | re.A),
    re.compile(r"\b(let's|we'll|we should|we need to)\s+\w+", re.I | re.A),
]

DECISION_PATTERNS = [
    re.compile(r"\b(decided|agreed|concluded|approved|confirmed|finalized)", re.I | re.A),
    re.compile(r"\b(decision|consensus|agreement|resolution)", re.I | re.A),
    re.compile(r"\b(we will|we're going|the plan is|going forward)", re.I | re.A),
    re.compile(r"\b(voted|selected|chose|picked|opted)", re.I | re.A),
]

_SENTENCE_END_RE = re.compile(r"([.!?])\s+")
_SEPARATOR = "\x00"
_WHITESPACE_RE = re.compile(r"\s+")
_BULLET_RE = re.compile(r"^\s*[-•*]\s*")
_DIGIT_RE = re.compile(r"\d", re.A)


def split_sentences(text: str) -> list[str]:
    """Split text on ASCII sentence-ending punctuation followed by whitespace.

    Fragments of 10 characters or fewer (after trimming) are dropped as noise.
    """
    marked = _SENTENCE_END_RE.sub(lambda m: m.group(1) + _SEPARATOR, text)
    pieces = (piece.strip() for piece in marked.split(_SEPARATOR))
    return [piece for piece in pieces if len(piece) > MIN_SENTENCE_LENGTH]


def clean_sentence(sentence: str) -> str:
    """Collapse whitespace, strip one leading bullet marker, and trim."""
    sentence = _WHITESPACE_RE.sub(" ", sentence)
    sentence = _BULLET_RE.sub("", sentence, count=1)
    return sentence.strip()


def score_sentence(sentence: str, all_sentences: list[str]) -> int:
    """Heuristic importance score for a sentence.

    Args:
        sentence: Sentence to score
        all_sentences: Every sentence of the transcript, in order

    Returns:
        Additive integer score (no upper bound)
    """
    score = 0
    lower = sentence.lower()

    for keyword in IMPORTANT_KEYWORDS:
        if keyword in lower:
            score += 2

    # First occurrence among the opening three sentences
    if all_sentences.index(sentence) < 3:
        score += 2

    word_count = len(sentence.split())
    if 10 < word_count < 40:
        score += 1

    if _DIGIT_RE.search(sentence):
        score += 1

    return score


def _rank(sentences: list[str]) -> list[tuple[int, str]]:
    """Return (index, sentence) pairs ordered by descending score.

    sorted() is stable, so equal scores keep transcript order.
    """
    scored = [
        (index, sentence, score_sentence(sentence, sentences))
        for index, sentence in enumerate(sentences)
    ]
    ranked = sorted(scored, key=lambda item: item[2], reverse=True)
    return [(index, sentence) for index, sentence, _ in ranked]


def extract_key_points(sentences: list[str]) -> list[str]:
    """Top-scored sentences, highest score first."""
    ranked = _rank(sentences)[:MAX_KEY_POINTS]
    return [clean_sentence(sentence) for _, sentence in ranked]


def _match_sentences(sentences: list[str], patterns: list[re.Pattern], limit: int) -> list[str]:
    """Cleaned sentences matching any pattern, in transcript order, deduplicated."""
    matches: list[str] = []
    for sentence in sentences:
        if any(pattern.search(sentence) for pattern in patterns):
            cleaned = clean_sentence(sentence)
            if cleaned not in matches:
                matches.append(cleaned)
    return matches[:limit]


def extract_action_items(sentences: list[str]) -> list[str]:
    """Sentences phrased as tasks, assignments, requests, or commitments."""
    return _match_sentences(sentences, ACTION_PATTERNS, MAX_ACTION_ITEMS)


def extract_decisions(sentences: list[str]) -> list[str]:
    """Sentences phrased as resolutions or choices."""
    return _match_sentences(sentences, DECISION_PATTERNS, MAX_DECISIONS)


def generate_summary(sentences: list[str]) -> str:
    """Join the most important sentences back in transcript order.

    Three sentences or fewer are returned verbatim.
    """
    if len(sentences) <= 3:
        return " ".join(sentences)

    count = min(MAX_SUMMARY_SENTENCES, math.ceil(len(sentences) * SUMMARY_RATIO))
    selected = sorted(_rank(sentences)[:count])
    return " ".join(clean_sentence(sentence) for _, sentence in selected)


def summarize(transcript: str) -> SummaryResult:
    """Summarize a transcript. Never raises; empty input yields a fixed result."""
    sentences = split_sentences(transcript)

    if not sentences:
        return SummaryResult(summary=NO_CONTENT_SUMMARY)

    return SummaryResult(
        summary=generate_summary(sentences),
        key_points=extract_key_points(sentences),
        action_items=extract_action_items(sentences),
        decisions=extract_decisions(sentences),
    )
