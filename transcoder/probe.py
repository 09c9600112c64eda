import json
import logging
import subprocess
from pathlib import Path

from .errors import ProbeError
from .renditions import SourceProbe

logger = logging.getLogger(__name__)


class SourceProber:
    def __init__(self, ffprobe: str = "ffprobe"):
        self.ffprobe = ffprobe

    def probe(self, source_path) -> SourceProbe:
        """Read duration and frame size of the first video stream with ffprobe."""
        source_path = Path(source_path)
        if not source_path.is_file():
            raise ProbeError(source_path, "file does not exist")

        cmd = [
            self.ffprobe,
            "-v", "error",
            "-select_streams", "v:0",
            "-show_entries", "stream=width,height:format=duration",
            "-of", "json",
            str(source_path),
        ]
        try:
            proc = subprocess.run(cmd, check=True, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        except FileNotFoundError as e:
            raise ProbeError(source_path, f"{self.ffprobe} not found") from e
        except subprocess.CalledProcessError as e:
            err = e.stderr.decode("utf-8", errors="ignore").strip() if e.stderr else str(e)
            raise ProbeError(source_path, err[:2000] or f"exit code {e.returncode}") from e

        try:
            info = json.loads(proc.stdout or b"{}")
        except ValueError as e:
            raise ProbeError(source_path, "unreadable ffprobe output") from e

        streams = info.get("streams") or []
        if not streams:
            raise ProbeError(source_path, "no video stream")

        try:
            width = int(streams[0]["width"])
            height = int(streams[0]["height"])
        except (KeyError, TypeError, ValueError) as e:
            raise ProbeError(source_path, "video stream has no frame size") from e
        if width <= 0 or height <= 0:
            raise ProbeError(source_path, f"invalid frame size {width}x{height}")

        try:
            duration = float(info.get("format", {}).get("duration") or 0.0)
        except (TypeError, ValueError):
            duration = 0.0

        result = SourceProbe(duration_seconds=duration, width=width, height=height)
        logger.info("Probed %s: %dx%d, %.2fs", source_path.name, width, height, duration)
        return result
