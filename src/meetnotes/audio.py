"""System audio capture through an FFmpeg subprocess."""

from __future__ import annotations

import logging
import subprocess
import sys
import threading
from datetime import datetime
from pathlib import Path

from meetnotes.errors import RecordingError

logger = logging.getLogger(__name__)

CODEC_ARGS = {
    "webm": ["-c:a", "libopus"],
    "mp3": ["-c:a", "libmp3lame", "-b:a", "192k"],
    "wav": ["-c:a", "pcm_s16le"],
}

RECORDING_EXTENSIONS = tuple(f".{fmt}" for fmt in CODEC_ARGS)

SETUP_INSTRUCTIONS = {
    "linux": """
Linux Audio Setup:
1. Ensure PulseAudio or PipeWire is running
2. Install FFmpeg: sudo apt install ffmpeg
3. To capture system audio, you may need to configure a monitor source:
   - Run: pactl list short sources
   - Look for a source ending with ".monitor"
   - Or use pavucontrol to configure recording sources
""",
    "win32": """
Windows Audio Setup:
1. Install FFmpeg and add to PATH
2. Enable "Stereo Mix" in Sound settings:
   - Right-click volume icon > Sounds
   - Recording tab > Right-click > Show Disabled Devices
   - Enable "Stereo Mix"
3. If Stereo Mix is not available, install VB-Cable or similar virtual audio driver
""",
    "darwin": """
macOS Audio Setup:
1. Install FFmpeg: brew install ffmpeg
2. Install BlackHole audio driver: brew install blackhole-2ch
3. Create a Multi-Output Device in Audio MIDI Setup
4. Configure apps to use the Multi-Output Device
""",
}


def _platform_key(platform: str) -> str:
    return "linux" if platform.startswith("linux") else platform


def input_device(platform: str) -> tuple[str, str]:
    """FFmpeg input format and device for capturing system audio.

    Raises:
        RecordingError: On platforms without a known capture device
    """
    key = _platform_key(platform)
    if key == "linux":
        # Default PulseAudio/PipeWire source
        return "pulse", "default"
    if key == "win32":
        return "dshow", "audio=Stereo Mix"
    if key == "darwin":
        return "avfoundation", ":0"
    raise RecordingError(f"Unsupported platform: {platform}")


class AudioCapture:
    """Record system audio to a file by driving FFmpeg."""

    def __init__(self, platform: str = sys.platform, ffmpeg: str = "ffmpeg"):
        self.platform = platform
        self.ffmpeg = ffmpeg
        self.output_path = ""
        self._process: subprocess.Popen | None = None
        self._lock = threading.Lock()

    @property
    def is_recording(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def check_ffmpeg(self) -> bool:
        try:
            proc = subprocess.run([self.ffmpeg, "-version"], capture_output=True)
        except OSError:
            return False
        return proc.returncode == 0

    def list_sources(self) -> list[dict[str, str]]:
        """System audio sources FFmpeg can capture on this platform."""
        key = _platform_key(self.platform)
        if key == "linux":
            return [{"id": "pulse-default", "name": "System Audio (PulseAudio/PipeWire)", "type": "audio"}]
        if key == "win32":
            return [{"id": "wasapi-loopback", "name": "System Audio (Windows)", "type": "audio"}]
        if key == "darwin":
            return [{"id": "avfoundation-default", "name": "Default Audio Input (macOS)", "type": "audio"}]
        return []

    def build_ffmpeg_args(
        self,
        output_path: str,
        sample_rate: int = 44100,
        channels: int = 2,
        fmt: str = "webm",
    ) -> list[str]:
        """Build the FFmpeg command line for a recording.

        Raises:
            ValueError: If fmt is not webm, mp3, or wav
            RecordingError: On platforms without a known capture device
        """
        if fmt not in CODEC_ARGS:
            raise ValueError(f"Unsupported audio format: {fmt}")

        input_format, device = input_device(self.platform)
        args = [
            self.ffmpeg,
            "-y",
            "-f", input_format,
            "-i", device,
            "-ac", str(channels),
            "-ar", str(sample_rate),
        ]
        args += CODEC_ARGS[fmt]
        args.append(output_path)
        return args

    def start(
        self,
        output_dir: str | Path,
        sample_rate: int = 44100,
        channels: int = 2,
        fmt: str = "webm",
    ) -> str:
        """Start recording into output_dir.

        Returns:
            Path of the file being recorded

        Raises:
            RecordingError: If already recording or FFmpeg is not installed
        """
        with self._lock:
            if self.is_recording:
                raise RecordingError("Recording already in progress")

            if not self.check_ffmpeg():
                raise RecordingError(
                    "FFmpeg is not installed. Please install FFmpeg to enable audio recording."
                )

            out_dir = Path(output_dir)
            out_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S-%f")
            output_path = str(out_dir / f"meeting-{timestamp}.{fmt}")

            args = self.build_ffmpeg_args(output_path, sample_rate, channels, fmt)
            logger.info("Starting FFmpeg: %s", " ".join(args))

            try:
                self._process = subprocess.Popen(
                    args,
                    stdin=subprocess.PIPE,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )
            except OSError as e:
                raise RecordingError(f"Failed to start FFmpeg: {e}") from e

            self.output_path = output_path
            return output_path

    def stop(self, timeout: float = 5.0) -> str:
        """Stop the recording and return the recorded file's path.

        FFmpeg is asked to quit by writing "q" to its stdin; it is terminated
        if it has not exited after timeout seconds.

        Raises:
            RecordingError: If nothing is recording or no file was written
        """
        with self._lock:
            process = self._process
            if process is None or process.poll() is not None:
                self._process = None
                raise RecordingError("No recording in progress")

            try:
                process.communicate(input=b"q", timeout=timeout)
            except subprocess.TimeoutExpired:
                logger.warning("FFmpeg did not exit after %.1fs, terminating", timeout)
                process.terminate()
                process.wait()

            logger.info("FFmpeg exited with code %s", process.returncode)
            self._process = None

            if not Path(self.output_path).exists():
                raise RecordingError("Recording file was not created")
            return self.output_path

    def status(self) -> dict:
        return {"is_recording": self.is_recording, "output_path": self.output_path}

    def setup_instructions(self) -> str:
        return SETUP_INSTRUCTIONS.get(_platform_key(self.platform), "Unsupported platform")
