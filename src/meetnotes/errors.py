"""Exceptions raised by the recording, transcription, and summarization backends."""


class MeetnotesError(RuntimeError):
    """Base class for meetnotes failures."""


class RecordingError(MeetnotesError):
    """Audio capture could not be started or stopped."""


class TranscriptionError(MeetnotesError):
    """A transcription backend is missing or failed."""


class SummarizationError(MeetnotesError):
    """A summarization backend is unreachable or failed."""
