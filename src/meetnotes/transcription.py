"""Local transcription with whisper.cpp, faster-whisper, or the whisper CLI."""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
import sys
import threading
from pathlib import Path

from meetnotes.errors import TranscriptionError
from meetnotes.models import TranscriptionResult, TranscriptSegment

logger = logging.getLogger(__name__)

FASTER_WHISPER = "faster-whisper"
WHISPER_CLI = "whisper"

# Runs inside a python3 subprocess; prints one JSON object to stdout
_FASTER_WHISPER_SCRIPT = """
import json, sys
from faster_whisper import WhisperModel

audio_path, model_name, language = sys.argv[1], sys.argv[2], sys.argv[3]
model = WhisperModel(model_name, device="cpu", compute_type="int8")
kwargs = {} if language == "auto" else {"language": language}
segments, info = model.transcribe(audio_path, **kwargs)

result = {"text": "", "segments": [], "language": info.language, "duration": info.duration}
for segment in segments:
    result["text"] += segment.text + " "
    result["segments"].append({
        "id": segment.id,
        "start": segment.start,
        "end": segment.end,
        "text": segment.text.strip(),
    })

print(json.dumps(result))
"""


def whisper_cpp_candidates(platform: str = sys.platform, home: Path | None = None) -> list[Path]:
    """Well-known install locations for a whisper.cpp binary."""
    home = home or Path.home()
    paths = [
        Path("/usr/local/bin/whisper"),
        Path("/usr/bin/whisper"),
        home / ".local" / "bin" / "whisper",
        home / ".meetnotes" / "whisper" / "main",
    ]
    if platform == "win32":
        paths.append(Path("C:\\Program Files\\Whisper\\whisper.exe"))
        paths.append(home / "whisper.cpp" / "main.exe")
    return paths


def install_instructions(platform: str = sys.platform) -> str:
    if platform.startswith("linux"):
        return """
Install faster-whisper (recommended):
  pip3 install faster-whisper

Or install openai-whisper:
  pip3 install openai-whisper

Or build whisper.cpp:
  git clone https://github.com/ggerganov/whisper.cpp
  cd whisper.cpp
  make
  # Download model:
  bash ./models/download-ggml-model.sh base
"""
    if platform == "win32":
        return """
Install faster-whisper (recommended):
  pip install faster-whisper

Or install openai-whisper:
  pip install openai-whisper

Or download whisper.cpp:
  https://github.com/ggerganov/whisper.cpp/releases
"""
    return ""


def convert_to_wav(input_path: str) -> str:
    """Convert audio to 16 kHz mono PCM WAV with FFmpeg.

    WAV input is returned unchanged.

    Raises:
        TranscriptionError: If FFmpeg fails
    """
    path = Path(input_path)
    if path.suffix.lower() == ".wav":
        return input_path

    output_path = path.with_name(f"{path.stem}_converted.wav")
    args = [
        "ffmpeg",
        "-i", str(path),
        "-ar", "16000",
        "-ac", "1",
        "-c:a", "pcm_s16le",
        "-y",
        str(output_path),
    ]
    try:
        proc = subprocess.run(args, capture_output=True, text=True)
    except OSError as e:
        raise TranscriptionError(f"Failed to convert audio to WAV: {e}") from e
    if proc.returncode != 0:
        raise TranscriptionError("Failed to convert audio to WAV")
    return str(output_path)


def _last_segment_end(segments: list[dict]) -> float:
    if not segments:
        return 0.0
    return segments[-1].get("end", 0.0) or 0.0


class WhisperTranscriber:
    """Transcribe recordings with whichever local whisper is installed.

    Only one transcription runs at a time per instance.
    """

    name = "local-whisper"

    def __init__(
        self,
        models_dir: str | Path | None = None,
        model: str = "base",
        language: str = "auto",
        platform: str = sys.platform,
    ):
        self.models_dir = Path(models_dir) if models_dir else Path.home() / ".meetnotes" / "models"
        self.model = model
        self.language = language
        self.platform = platform
        self.backend: str | None = None
        self._lock = threading.Lock()

    def detect_backend(self) -> str | None:
        """Find an installed whisper, preferring whisper.cpp.

        Returns:
            Path to a whisper.cpp binary, "faster-whisper", "whisper", or None
        """
        for candidate in whisper_cpp_candidates(self.platform):
            if candidate.exists():
                self.backend = str(candidate)
                return self.backend

        if self._has_faster_whisper():
            self.backend = FASTER_WHISPER
            return self.backend

        if self._has_whisper_cli():
            self.backend = WHISPER_CLI
            return self.backend

        self.backend = None
        return None

    def is_available(self) -> bool:
        return self.detect_backend() is not None

    def _has_faster_whisper(self) -> bool:
        try:
            proc = subprocess.run(
                ["python3", "-c", "import faster_whisper"], capture_output=True
            )
        except OSError:
            return False
        return proc.returncode == 0

    def _has_whisper_cli(self) -> bool:
        if shutil.which(WHISPER_CLI) is None:
            return False
        try:
            proc = subprocess.run([WHISPER_CLI, "--help"], capture_output=True)
        except OSError:
            return False
        return proc.returncode == 0

    def transcribe(
        self,
        audio_path: str,
        model: str | None = None,
        language: str | None = None,
    ) -> TranscriptionResult:
        """Transcribe an audio file.

        Raises:
            TranscriptionError: If busy, no whisper is installed, or the run fails
            FileNotFoundError: If the audio file doesn't exist
        """
        if not self._lock.acquire(blocking=False):
            raise TranscriptionError("Transcription already in progress")

        try:
            if not Path(audio_path).exists():
                raise FileNotFoundError(f"Audio file not found: {audio_path}")

            backend = self.detect_backend()
            if backend is None:
                raise TranscriptionError(
                    "Whisper is not installed. Please install whisper.cpp or faster-whisper."
                )

            model = model or self.model
            language = language or self.language
            logger.info(f"Transcribing {audio_path} with {backend} ({model})")

            if backend == FASTER_WHISPER:
                return self._transcribe_faster_whisper(audio_path, model, language)
            if backend == WHISPER_CLI:
                return self._transcribe_whisper_cli(audio_path, model, language)
            return self._transcribe_whisper_cpp(backend, audio_path, model, language)
        finally:
            self._lock.release()

    def _transcribe_faster_whisper(self, audio_path: str, model: str, language: str) -> TranscriptionResult:
        proc = subprocess.run(
            ["python3", "-c", _FASTER_WHISPER_SCRIPT, audio_path, model, language],
            capture_output=True,
            text=True,
        )
        if proc.returncode != 0 or not proc.stdout:
            raise TranscriptionError(f"Transcription failed: {proc.stderr}")
        try:
            data = json.loads(proc.stdout)
        except json.JSONDecodeError as e:
            raise TranscriptionError(f"Failed to parse output: {proc.stdout}") from e
        return TranscriptionResult(**data)

    def _transcribe_whisper_cli(self, audio_path: str, model: str, language: str) -> TranscriptionResult:
        path = Path(audio_path)
        output_dir = path.parent
        args = [
            WHISPER_CLI,
            audio_path,
            "--model", model,
            "--output_dir", str(output_dir),
            "--output_format", "json",
        ]
        if language != "auto":
            args += ["--language", language]

        proc = subprocess.run(args, capture_output=True, text=True)
        if proc.returncode != 0:
            raise TranscriptionError(f"Whisper exited with code {proc.returncode}: {proc.stderr}")

        json_path = output_dir / f"{path.stem}.json"
        if not json_path.exists():
            raise TranscriptionError("Transcription output file not found")
        try:
            data = json.loads(json_path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise TranscriptionError("Failed to read transcription output") from e

        segments = data.get("segments") or []
        return TranscriptionResult(
            text=data.get("text", ""),
            segments=[_segment_from_dict(i, s) for i, s in enumerate(segments)],
            language=data.get("language") or "en",
            duration=_last_segment_end(segments),
        )

    def _transcribe_whisper_cpp(
        self, binary: str, audio_path: str, model: str, language: str
    ) -> TranscriptionResult:
        model_path = self.models_dir / f"ggml-{model}.bin"
        if not model_path.exists():
            raise TranscriptionError(
                f"Model not found: {model_path}. "
                "Download from https://huggingface.co/ggerganov/whisper.cpp"
            )

        wav_path = convert_to_wav(audio_path)
        args = [binary, "-m", str(model_path), "-f", wav_path, "-oj"]
        if language != "auto":
            args += ["-l", language]

        try:
            proc = subprocess.run(args, capture_output=True, text=True)
        finally:
            if wav_path != audio_path:
                Path(wav_path).unlink(missing_ok=True)

        if proc.returncode != 0 or not proc.stdout:
            raise TranscriptionError(f"whisper.cpp failed: {proc.stderr}")

        resolved_language = language if language != "auto" else "en"
        try:
            data = json.loads(proc.stdout)
        except json.JSONDecodeError:
            text = proc.stdout.strip()
            return TranscriptionResult(
                text=text,
                segments=[TranscriptSegment(id=0, text=text)],
                language="en",
            )

        entries = data.get("transcription") or []
        return TranscriptionResult(
            text=" ".join(e.get("text", "") for e in entries),
            segments=[_segment_from_dict(i, e) for i, e in enumerate(entries)],
            language=resolved_language,
        )


def _segment_from_dict(index: int, data: dict) -> TranscriptSegment:
    return TranscriptSegment(
        id=data.get("id", index),
        start=data.get("start", 0.0) or 0.0,
        end=data.get("end", 0.0) or 0.0,
        text=(data.get("text") or "").strip(),
        speaker=data.get("speaker"),
    )
