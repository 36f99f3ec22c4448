"""Record, transcribe, and summarize meetings."""

__version__ = "0.1.0"
