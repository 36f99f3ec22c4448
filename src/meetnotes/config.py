"""Configuration management for meetnotes."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

AI_MODES = ("cloud", "local", "extractive")

# Settings the user can change at runtime; persisted to config.json
PERSISTED_FIELDS = (
    "ai_mode",
    "openai_api_key",
    "whisper_model",
    "summarization_model",
    "ollama_model",
)

# Built-in defaults
DEFAULT_SYSTEM_PROMPT = (
    "You are a professional meeting assistant. Always respond with valid JSON only."
)

DEFAULT_SUMMARY_PROMPT = """You are an AI meeting assistant. Analyze the following meeting transcript and provide a structured summary.

MEETING TRANSCRIPT:
{transcript}

Please provide your response in the following exact JSON format:
{{
  "summary": "2-3 paragraph summary of the meeting",
  "keyPoints": ["Key point 1", "Key point 2", "Key point 3"],
  "actionItems": ["Action item 1 with owner if mentioned", "Action item 2"],
  "decisions": ["Decision 1", "Decision 2"]
}}

If any section has no items, use an empty array []. Return ONLY valid JSON, no other text."""


def _resolve_prompt(env_var_name: str, default: str) -> str:
    """
    Resolve a prompt value from environment variable.

    If env var is set to a file path that exists, read its contents.
    Otherwise use the string value directly.
    If unset, use the provided default.
    """
    value = os.getenv(env_var_name)
    if value is None:
        return default

    path = Path(value).expanduser()
    if path.exists() and path.is_file():
        return path.read_text()

    return value


def _parse_bool(value: str | None) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return False
    return value.lower() in ("true", "1", "yes", "on")


def _default_data_dir() -> str:
    return str(Path.home() / ".meetnotes")


@dataclass
class Config:
    """Configuration for meetnotes."""

    data_dir: str = ""
    ai_mode: str = "cloud"
    openai_api_key: str = ""
    transcription_model: str = "whisper-1"
    summarization_model: str = "gpt-4o-mini"
    whisper_model: str = "base"
    language: str = "auto"
    ollama_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2"
    temperature: float = 0.7
    max_tokens: int = 2048
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    summary_prompt: str = DEFAULT_SUMMARY_PROMPT
    verbose: bool = False

    def __post_init__(self):
        if not self.data_dir:
            self.data_dir = _default_data_dir()

    @property
    def recordings_dir(self) -> Path:
        return Path(self.data_dir).expanduser() / "recordings"

    @property
    def transcripts_dir(self) -> Path:
        return Path(self.data_dir).expanduser() / "transcripts"

    @property
    def models_dir(self) -> Path:
        return Path(self.data_dir).expanduser() / "models"

    @property
    def notes_dir(self) -> Path:
        return Path(self.data_dir).expanduser() / "notes"

    @property
    def settings_path(self) -> Path:
        return Path(self.data_dir).expanduser() / "config.json"

    @property
    def has_api_key(self) -> bool:
        return bool(self.openai_api_key)

    def ensure_dirs(self) -> None:
        """Create the recordings, transcripts, models, and notes directories."""
        for path in (self.recordings_dir, self.transcripts_dir, self.models_dir, self.notes_dir):
            path.mkdir(parents=True, exist_ok=True)


def load_settings(path: Path) -> dict:
    """Read persisted settings, ignoring unknown keys and unreadable files."""
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Error loading settings from {path}: {e}")
        return {}
    if not isinstance(data, dict):
        return {}
    return {key: data[key] for key in PERSISTED_FIELDS if key in data}


def save_settings(config: Config) -> Path:
    """Persist the user-editable settings to config.json using atomic write."""
    path = config.settings_path
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {key: getattr(config, key) for key in PERSISTED_FIELDS}
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(data, indent=2))
    tmp.replace(path)
    return path


def mask_api_key(api_key: str) -> str:
    """Hide all but the last four characters of an API key."""
    if not api_key:
        return ""
    return "••••••••" + api_key[-4:]


def load_config() -> Config:
    """
    Load configuration from environment variables, .env file, and config.json.

    Environment variables take precedence over persisted settings.

    Returns:
        Config instance with all settings loaded.
    """
    load_dotenv()

    data_dir = os.getenv("MEETNOTES_DATA_DIR") or _default_data_dir()
    config = Config(data_dir=data_dir)

    for key, value in load_settings(config.settings_path).items():
        setattr(config, key, value)

    config.ai_mode = os.getenv("AI_MODE", config.ai_mode)
    config.openai_api_key = os.getenv("OPENAI_API_KEY", config.openai_api_key)
    config.transcription_model = os.getenv("TRANSCRIPTION_MODEL", config.transcription_model)
    config.summarization_model = os.getenv("SUMMARIZATION_MODEL", config.summarization_model)
    config.whisper_model = os.getenv("WHISPER_MODEL", config.whisper_model)
    config.language = os.getenv("LANGUAGE", config.language)
    config.ollama_url = os.getenv("OLLAMA_URL", config.ollama_url)
    config.ollama_model = os.getenv("OLLAMA_MODEL", config.ollama_model)
    config.temperature = float(os.getenv("TEMPERATURE", str(config.temperature)))
    config.max_tokens = int(os.getenv("MAX_TOKENS", str(config.max_tokens)))
    config.verbose = _parse_bool(os.getenv("VERBOSE"))

    if config.ai_mode not in AI_MODES:
        raise ValueError(f"Unknown AI mode {config.ai_mode!r}; expected one of {', '.join(AI_MODES)}")

    # Resolve prompts (file path vs inline string)
    config.system_prompt = _resolve_prompt("SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT)
    config.summary_prompt = _resolve_prompt("SUMMARY_PROMPT", DEFAULT_SUMMARY_PROMPT)

    return config
