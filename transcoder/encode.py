import logging
import math
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .errors import EncodeError
from .renditions import RenditionSpec

logger = logging.getLogger(__name__)

VIDEO_CODEC = "libx264"
AUDIO_CODEC = "aac"


@dataclass(frozen=True)
class Segment:
    rendition_name: str
    index: int
    path: Path


@dataclass(frozen=True)
class RenditionOutput:
    rendition: RenditionSpec
    playlist: Path
    segments: tuple[Segment, ...]

    @property
    def files(self) -> list[Path]:
        return [self.playlist, *(s.path for s in self.segments)]


def segment_padding(duration_seconds: float, segment_seconds: int) -> int:
    """Digits needed for segment indexes: 95s at 10s per segment -> 10 segments -> 2."""
    estimated = math.ceil(duration_seconds / segment_seconds) if duration_seconds > 0 else 0
    return max(1, len(str(estimated)))


def segment_filename(rendition_name: str, index: int, padding: int) -> str:
    return f"{rendition_name}_{index:0{padding}d}.ts"


def playlist_filename(rendition_name: str) -> str:
    return f"{rendition_name}.m3u8"


class HlsEncoder:
    def __init__(
        self,
        ffmpeg: str = "ffmpeg",
        *,
        segment_seconds: int = 10,
        audio_bitrate: str = "128k",
    ):
        self.ffmpeg = ffmpeg
        self.segment_seconds = segment_seconds
        self.audio_bitrate = audio_bitrate

    def build_command(self, source, rendition: RenditionSpec, out_dir, padding: int) -> list[str]:
        out_dir = Path(out_dir)
        return [
            self.ffmpeg,
            "-y",
            "-loglevel", "error",
            "-i", str(source),
            "-vf", f"scale={rendition.width}:{rendition.height}",
            "-c:v", VIDEO_CODEC,
            "-preset", "veryfast",
            "-b:v", rendition.video_bitrate,
            "-maxrate", rendition.video_bitrate,
            "-bufsize", f"{rendition.video_bitrate_kbps * 2}k",
            "-c:a", AUDIO_CODEC,
            "-b:a", self.audio_bitrate,
            "-hls_time", str(self.segment_seconds),
            "-hls_list_size", "0",
            "-hls_playlist_type", "vod",
            "-hls_segment_filename", str(out_dir / f"{rendition.name}_%0{padding}d.ts"),
            str(out_dir / playlist_filename(rendition.name)),
        ]

    def encode(self, source, rendition: RenditionSpec, out_dir, duration_seconds: float) -> RenditionOutput:
        """
        Encode one rendition to HLS under out_dir. Blocks until ffmpeg exits and
        raises EncodeError on a non-zero exit.
        """
        out_dir = Path(out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        padding = segment_padding(duration_seconds, self.segment_seconds)
        cmd = self.build_command(source, rendition, out_dir, padding)

        logger.info("Encoding %s (%s @ %s)", rendition.name, rendition.resolution, rendition.video_bitrate)
        try:
            subprocess.run(cmd, check=True, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        except FileNotFoundError as e:
            raise EncodeError(rendition.name, 127, f"{self.ffmpeg} not found") from e
        except subprocess.CalledProcessError as e:
            err = e.stderr.decode("utf-8", errors="ignore") if e.stderr else ""
            raise EncodeError(rendition.name, e.returncode, err[:4000]) from e

        return collect_output(out_dir, rendition)


def collect_output(out_dir, rendition: RenditionSpec) -> RenditionOutput:
    """Gather the playlist and segments ffmpeg wrote for a rendition, in index order."""
    out_dir = Path(out_dir)
    playlist = out_dir / playlist_filename(rendition.name)
    if not playlist.is_file():
        raise EncodeError(rendition.name, 0, f"{playlist.name} was not produced")

    pattern = re.compile(rf"^{re.escape(rendition.name)}_(\d+)\.ts$")
    segments = []
    for p in out_dir.iterdir():
        m = pattern.match(p.name)
        if m and p.is_file():
            segments.append(Segment(rendition.name, int(m.group(1)), p))
    segments.sort(key=lambda s: s.index)
    return RenditionOutput(rendition=rendition, playlist=playlist, segments=tuple(segments))
