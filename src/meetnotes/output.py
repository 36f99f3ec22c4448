"""Markdown export of meeting notes."""

import logging
import re
from datetime import datetime
from pathlib import Path

from meetnotes.models import Meeting, StoredTranscript, SummaryResult

logger = logging.getLogger(__name__)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    slug = _SLUG_RE.sub("-", title.lower()).strip("-")
    return slug or "meeting"


def _format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs:02d}s"


def render_meeting_markdown(
    meeting: Meeting,
    summary: SummaryResult,
    backend_name: str = "",
    transcript: StoredTranscript | None = None,
) -> str:
    """Build the markdown document for a meeting. Empty sections are omitted."""
    lines = []

    lines.append(f"# {meeting.title}")
    lines.append("")

    details = [f"**Date:** {meeting.date}"]
    if meeting.duration:
        details.append(f"**Duration:** {_format_duration(meeting.duration)}")
    if backend_name:
        details.append(f"**Summarized by:** {backend_name}")
    lines.append(" | ".join(details))
    lines.append("")

    if summary.summary:
        lines.append("## Summary")
        lines.append(summary.summary)
        lines.append("")

    if summary.key_points:
        lines.append("## Key Points")
        for point in summary.key_points:
            lines.append(f"- {point}")
        lines.append("")

    if summary.action_items:
        lines.append("## Action Items")
        for item in summary.action_items:
            lines.append(f"- [ ] {item}")
        lines.append("")

    if summary.decisions:
        lines.append("## Decisions")
        for i, decision in enumerate(summary.decisions, 1):
            lines.append(f"{i}. {decision}")
        lines.append("")

    if transcript and transcript.text:
        lines.append("## Transcript")
        lines.append(transcript.text.strip())
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def write_meeting_markdown(
    meeting: Meeting,
    summary: SummaryResult,
    output_dir: str,
    backend_name: str = "",
    transcript: StoredTranscript | None = None,
) -> str:
    """
    Write a meeting's notes as a markdown file.

    Args:
        meeting: The meeting being exported
        summary: Its summary
        output_dir: Directory to write the markdown file to
        backend_name: Name of the summarizer that produced the summary
        transcript: Full transcript to append, if any

    Returns:
        Path to the generated markdown file
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    timestamp_str = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    filepath = output_path / f"{timestamp_str}-{slugify(meeting.title)}.md"

    filepath.write_text(render_meeting_markdown(meeting, summary, backend_name, transcript))
    logger.info(f"Wrote meeting notes to {filepath}")

    return str(filepath)
