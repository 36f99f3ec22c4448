"""Pydantic models for meetings, transcripts, and summaries."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MeetingStatus = Literal["recording", "transcribing", "summarizing", "complete", "error"]


class SummaryResult(BaseModel):
    """Structured summary of a meeting transcript."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str = Field(default="", description="Free-text summary")
    key_points: list[str] = Field(default_factory=list, alias="keyPoints")
    action_items: list[str] = Field(default_factory=list, alias="actionItems")
    decisions: list[str] = Field(default_factory=list)


class TranscriptSegment(BaseModel):
    """A timed span of transcribed speech."""

    id: int = 0
    start: float = 0.0
    end: float = 0.0
    text: str = ""
    speaker: str | None = None


class TranscriptionResult(BaseModel):
    """Output of any transcription backend."""

    text: str = ""
    segments: list[TranscriptSegment] = Field(default_factory=list)
    language: str = "en"
    duration: float = 0.0


class Meeting(BaseModel):
    """A recorded meeting."""

    id: int
    title: str
    date: str = Field(description="When the meeting took place")
    duration: float = Field(default=0.0, description="Length in seconds")
    audio_path: str = ""
    transcript_path: str | None = None
    status: MeetingStatus = "recording"
    created_at: str = ""
    updated_at: str = ""


class StoredTranscript(BaseModel):
    """A transcript persisted for a meeting."""

    id: int
    meeting_id: int
    text: str
    segments: list[TranscriptSegment] = Field(default_factory=list)
    language: str = "en"
    created_at: str = ""


class StoredSummary(BaseModel):
    """A summary persisted for a meeting."""

    id: int
    meeting_id: int
    summary: str
    key_points: list[str] = Field(default_factory=list)
    action_items: list[str] = Field(default_factory=list)
    decisions: list[str] = Field(default_factory=list)
    model: str = Field(default="", description="Backend that produced it")
    created_at: str = ""

    def to_result(self) -> SummaryResult:
        return SummaryResult(
            summary=self.summary,
            key_points=list(self.key_points),
            action_items=list(self.action_items),
            decisions=list(self.decisions),
        )
