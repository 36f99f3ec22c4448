"""Tests for the JSON meeting store."""

import json

import pytest

from meetnotes.errors import MeetnotesError
from meetnotes.models import SummaryResult, TranscriptionResult, TranscriptSegment
from meetnotes.store import MeetingStore


@pytest.fixture
def store(tmp_path):
    store = MeetingStore(str(tmp_path))
    store.initialize()
    return store


@pytest.fixture
def transcript():
    return TranscriptionResult(
        text="We decided to use Postgres. Alice will write the migration.",
        segments=[
            TranscriptSegment(id=0, start=0.0, end=2.5, text="We decided to use Postgres."),
            TranscriptSegment(id=1, start=2.5, end=5.0, text="Alice will write the migration."),
        ],
        language="en",
        duration=5.0,
    )


@pytest.fixture
def summary():
    return SummaryResult(
        summary="Database planning.",
        key_points=["Use Postgres"],
        action_items=["Alice will write the migration."],
        decisions=["We decided to use Postgres."],
    )


class TestInitialize:

    def test_creates_empty_document(self, tmp_path):
        store = MeetingStore(str(tmp_path / "nested"))
        store.initialize()
        data = json.loads(store.store_path.read_text())
        assert data == {"meetings": [], "transcripts": [], "summaries": []}

    def test_keeps_existing_document(self, store):
        store.create_meeting("Standup")
        store.initialize()
        assert len(store.list_meetings()) == 1

    def test_missing_file_reads_as_empty(self, tmp_path):
        store = MeetingStore(str(tmp_path))
        assert store.list_meetings() == []

    @pytest.mark.parametrize("contents", ["{not json", "[1, 2]"])
    def test_corrupt_file_raises_with_path(self, tmp_path, contents):
        (tmp_path / "meetings.json").write_text(contents)
        store = MeetingStore(str(tmp_path))
        with pytest.raises(MeetnotesError, match="Corrupt meeting store") as exc_info:
            store.initialize()
        assert str(store.store_path) in str(exc_info.value)
        with pytest.raises(MeetnotesError):
            store.list_meetings()


class TestMeetings:

    def test_create_assigns_id_and_timestamps(self, store):
        meeting = store.create_meeting("Standup", audio_path="/tmp/a.webm")
        assert meeting.id > 0
        assert meeting.status == "recording"
        assert meeting.created_at == meeting.updated_at
        assert meeting.date == meeting.created_at

    def test_ids_unique_when_created_quickly(self, store):
        ids = {store.create_meeting(f"M{i}").id for i in range(20)}
        assert len(ids) == 20

    def test_create_persists(self, store, tmp_path):
        meeting = store.create_meeting("Standup")
        reopened = MeetingStore(str(tmp_path))
        assert reopened.get_meeting(meeting.id) == meeting

    def test_get_unknown_returns_none(self, store):
        assert store.get_meeting(12345) is None

    def test_update(self, store):
        meeting = store.create_meeting("Standup")
        updated = store.update_meeting(meeting.id, status="complete", title="Daily standup")
        assert updated.status == "complete"
        assert updated.title == "Daily standup"
        assert updated.id == meeting.id
        assert store.get_meeting(meeting.id).status == "complete"

    def test_update_cannot_change_id(self, store):
        meeting = store.create_meeting("Standup")
        updated = store.update_meeting(meeting.id, id=1)
        assert updated.id == meeting.id

    def test_update_unknown_returns_none(self, store):
        assert store.update_meeting(999, status="complete") is None

    def test_update_rejects_bad_status(self, store):
        meeting = store.create_meeting("Standup")
        with pytest.raises(ValueError):
            store.update_meeting(meeting.id, status="exploded")

    def test_list_newest_first(self, store):
        first = store.create_meeting("First")
        second = store.create_meeting("Second")
        data = json.loads(store.store_path.read_text())
        data["meetings"][0]["created_at"] = "2020-01-01T00:00:00"
        data["meetings"][1]["created_at"] = "2024-01-01T00:00:00"
        store.store_path.write_text(json.dumps(data))
        assert [m.id for m in store.list_meetings()] == [second.id, first.id]

    def test_delete_cascades(self, store, transcript, summary):
        meeting = store.create_meeting("Standup")
        other = store.create_meeting("Retro")
        store.save_transcript(meeting.id, transcript)
        store.save_summary(meeting.id, summary, "local-extractive")
        store.save_summary(other.id, summary, "local-extractive")

        assert store.delete_meeting(meeting.id) is True
        assert store.get_meeting(meeting.id) is None
        assert store.get_transcript(meeting.id) is None
        assert store.get_summary(meeting.id) is None
        assert store.get_summary(other.id) is not None

    def test_delete_unknown_returns_false(self, store):
        assert store.delete_meeting(42) is False


class TestTranscriptsAndSummaries:

    def test_save_and_get_transcript(self, store, transcript):
        meeting = store.create_meeting("Standup")
        stored = store.save_transcript(meeting.id, transcript)
        loaded = store.get_transcript(meeting.id)
        assert loaded == stored
        assert loaded.segments[1].text == "Alice will write the migration."

    def test_save_transcript_replaces_previous(self, store, transcript):
        meeting = store.create_meeting("Standup")
        store.save_transcript(meeting.id, transcript)
        store.save_transcript(meeting.id, TranscriptionResult(text="Second take"))
        data = json.loads(store.store_path.read_text())
        assert len(data["transcripts"]) == 1
        assert store.get_transcript(meeting.id).text == "Second take"

    def test_save_and_get_summary(self, store, summary):
        meeting = store.create_meeting("Standup")
        store.save_summary(meeting.id, summary, "gpt-4o-mini")
        loaded = store.get_summary(meeting.id)
        assert loaded.model == "gpt-4o-mini"
        assert loaded.to_result() == summary

    def test_save_summary_replaces_previous(self, store, summary):
        meeting = store.create_meeting("Standup")
        store.save_summary(meeting.id, summary, "cloud")
        store.save_summary(meeting.id, SummaryResult(summary="v2"), "ollama")
        loaded = store.get_summary(meeting.id)
        assert loaded.summary == "v2"
        assert loaded.model == "ollama"

    def test_get_missing_returns_none(self, store):
        assert store.get_transcript(1) is None
        assert store.get_summary(1) is None


class TestQueries:

    def test_search_title_case_insensitive(self, store):
        meeting = store.create_meeting("Quarterly Planning")
        store.create_meeting("Standup")
        assert [m.id for m in store.search_meetings("quarterly")] == [meeting.id]

    def test_search_transcript(self, store, transcript):
        meeting = store.create_meeting("Standup")
        store.save_transcript(meeting.id, transcript)
        assert [m.id for m in store.search_meetings("POSTGRES")] == [meeting.id]

    def test_search_summary(self, store, summary):
        meeting = store.create_meeting("Standup")
        store.save_summary(meeting.id, summary, "cloud")
        assert [m.id for m in store.search_meetings("database")] == [meeting.id]

    def test_search_no_match(self, store):
        store.create_meeting("Standup")
        assert store.search_meetings("budget") == []

    def test_details(self, store, transcript, summary):
        meeting = store.create_meeting("Standup")
        store.save_transcript(meeting.id, transcript)
        store.save_summary(meeting.id, summary, "cloud")
        found, stored_transcript, stored_summary = store.get_meeting_details(meeting.id)
        assert found == meeting
        assert stored_transcript.text == transcript.text
        assert stored_summary.summary == summary.summary

    def test_details_without_transcript(self, store):
        meeting = store.create_meeting("Standup")
        assert store.get_meeting_details(meeting.id) == (meeting, None, None)

    def test_details_unknown(self, store):
        assert store.get_meeting_details(7) is None
