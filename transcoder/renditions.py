from dataclasses import dataclass


@dataclass(frozen=True)
class RenditionSpec:
    name: str
    width: int
    height: int
    video_bitrate: str  # ffmpeg notation, e.g. "1400k"

    @property
    def video_bitrate_kbps(self) -> int:
        return int(self.video_bitrate.lower().rstrip("k"))

    @property
    def bandwidth(self) -> int:
        """Peak bits per second advertised in the master manifest."""
        return self.video_bitrate_kbps * 1000

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class SourceProbe:
    duration_seconds: float
    width: int
    height: int


# Ordered from lowest to highest quality
RENDITION_CATALOG = (
    RenditionSpec("360p", 480, 360, "800k"),
    RenditionSpec("480p", 640, 480, "1400k"),
    RenditionSpec("720p", 1280, 720, "2800k"),
    RenditionSpec("1080p", 1920, 1080, "5000k"),
)


def plan(catalog, probe: SourceProbe) -> tuple[RenditionSpec, ...]:
    """
    Select the renditions that fit inside the source frame, ascending by resolution.
    Never upscales. May return an empty tuple for very small sources.
    """
    eligible = [r for r in catalog if r.width <= probe.width and r.height <= probe.height]
    return tuple(sorted(eligible, key=lambda r: (r.width * r.height, r.video_bitrate_kbps)))
