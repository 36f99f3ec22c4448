"""Meeting, transcript, and summary store backed by meetings.json."""

import json
import time
from datetime import datetime
from pathlib import Path

from meetnotes.errors import MeetnotesError
from meetnotes.models import (
    Meeting,
    StoredSummary,
    StoredTranscript,
    SummaryResult,
    TranscriptionResult,
)


def _now() -> str:
    return datetime.now().isoformat()


class MeetingStore:
    """Meetings with their transcripts and summaries in a single JSON document.

    The whole document is re-read before and rewritten after every mutation.
    Each meeting has at most one transcript and one summary.
    """

    def __init__(self, data_dir: str):
        self.store_path = Path(data_dir).expanduser() / "meetings.json"
        self._last_id = 0

    def initialize(self):
        """Create meetings.json with empty collections, or check the existing one is readable."""
        if self.store_path.exists():
            self._load()
        else:
            self._save({"meetings": [], "transcripts": [], "summaries": []})

    def _load(self) -> dict[str, list[dict]]:
        """Read meetings.json.

        Raises:
            MeetnotesError: If the file is not a JSON object
        """
        data = {"meetings": [], "transcripts": [], "summaries": []}
        if self.store_path.exists():
            try:
                with open(self.store_path, encoding="utf-8") as f:
                    stored = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise MeetnotesError(f"Corrupt meeting store {self.store_path}: {e}") from e
            if not isinstance(stored, dict):
                raise MeetnotesError(f"Corrupt meeting store {self.store_path}: not a JSON object")
            data.update(stored)
        return data

    def _save(self, data: dict[str, list[dict]]):
        """Save the document to meetings.json using atomic write.

        Uses temp file + rename to ensure atomicity.
        """
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.store_path.with_suffix(".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        tmp.replace(self.store_path)

    def _new_id(self) -> int:
        """Millisecond timestamp, bumped so ids stay unique within this store."""
        new_id = max(int(time.time() * 1000), self._last_id + 1)
        self._last_id = new_id
        return new_id

    # --- Meetings ---

    def create_meeting(
        self,
        title: str,
        date: str = "",
        duration: float = 0.0,
        audio_path: str = "",
        status: str = "recording",
    ) -> Meeting:
        data = self._load()
        now = _now()
        meeting = Meeting(
            id=self._new_id(),
            title=title,
            date=date or now,
            duration=duration,
            audio_path=audio_path,
            status=status,
            created_at=now,
            updated_at=now,
        )
        data["meetings"].append(meeting.model_dump())
        self._save(data)
        return meeting

    def update_meeting(self, meeting_id: int, **updates) -> Meeting | None:
        """Apply field updates to a meeting.

        Returns:
            The updated meeting, or None if no meeting has that id.
        """
        data = self._load()
        for index, raw in enumerate(data["meetings"]):
            if raw.get("id") == meeting_id:
                updates.pop("id", None)
                merged = {**raw, **updates, "updated_at": _now()}
                meeting = Meeting.model_validate(merged)
                data["meetings"][index] = meeting.model_dump()
                self._save(data)
                return meeting
        return None

    def get_meeting(self, meeting_id: int) -> Meeting | None:
        for raw in self._load()["meetings"]:
            if raw.get("id") == meeting_id:
                return Meeting.model_validate(raw)
        return None

    def list_meetings(self) -> list[Meeting]:
        """All meetings, most recently created first."""
        meetings = [Meeting.model_validate(raw) for raw in self._load()["meetings"]]
        return sorted(meetings, key=lambda m: m.created_at, reverse=True)

    def delete_meeting(self, meeting_id: int) -> bool:
        """Delete a meeting with its transcript and summary.

        Returns:
            True if a meeting was removed.
        """
        data = self._load()
        before = len(data["meetings"])
        data["meetings"] = [m for m in data["meetings"] if m.get("id") != meeting_id]
        data["transcripts"] = [t for t in data["transcripts"] if t.get("meeting_id") != meeting_id]
        data["summaries"] = [s for s in data["summaries"] if s.get("meeting_id") != meeting_id]
        self._save(data)
        return len(data["meetings"]) < before

    # --- Transcripts and summaries ---

    def save_transcript(self, meeting_id: int, transcript: TranscriptionResult) -> StoredTranscript:
        """Store a transcript, replacing any previous one for the meeting."""
        data = self._load()
        stored = StoredTranscript(
            id=self._new_id(),
            meeting_id=meeting_id,
            text=transcript.text,
            segments=transcript.segments,
            language=transcript.language,
            created_at=_now(),
        )
        data["transcripts"] = [t for t in data["transcripts"] if t.get("meeting_id") != meeting_id]
        data["transcripts"].append(stored.model_dump())
        self._save(data)
        return stored

    def get_transcript(self, meeting_id: int) -> StoredTranscript | None:
        for raw in self._load()["transcripts"]:
            if raw.get("meeting_id") == meeting_id:
                return StoredTranscript.model_validate(raw)
        return None

    def save_summary(self, meeting_id: int, summary: SummaryResult, model: str) -> StoredSummary:
        """Store a summary, replacing any previous one for the meeting."""
        data = self._load()
        stored = StoredSummary(
            id=self._new_id(),
            meeting_id=meeting_id,
            summary=summary.summary,
            key_points=summary.key_points,
            action_items=summary.action_items,
            decisions=summary.decisions,
            model=model,
            created_at=_now(),
        )
        data["summaries"] = [s for s in data["summaries"] if s.get("meeting_id") != meeting_id]
        data["summaries"].append(stored.model_dump())
        self._save(data)
        return stored

    def get_summary(self, meeting_id: int) -> StoredSummary | None:
        for raw in self._load()["summaries"]:
            if raw.get("meeting_id") == meeting_id:
                return StoredSummary.model_validate(raw)
        return None

    # --- Queries ---

    def search_meetings(self, query: str) -> list[Meeting]:
        """Meetings whose title, transcript, or summary contains query (case-insensitive)."""
        data = self._load()
        needle = query.lower()
        transcripts = {t.get("meeting_id"): t.get("text", "") for t in data["transcripts"]}
        summaries = {s.get("meeting_id"): s.get("summary", "") for s in data["summaries"]}

        matches = []
        for raw in data["meetings"]:
            meeting_id = raw.get("id")
            haystacks = (
                raw.get("title", ""),
                transcripts.get(meeting_id, ""),
                summaries.get(meeting_id, ""),
            )
            if any(needle in text.lower() for text in haystacks):
                matches.append(Meeting.model_validate(raw))
        return matches

    def get_meeting_details(
        self, meeting_id: int
    ) -> tuple[Meeting, StoredTranscript | None, StoredSummary | None] | None:
        """A meeting with its transcript and summary, or None if unknown."""
        meeting = self.get_meeting(meeting_id)
        if meeting is None:
            return None
        return meeting, self.get_transcript(meeting_id), self.get_summary(meeting_id)
