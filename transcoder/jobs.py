import enum
from dataclasses import asdict, dataclass, field

from .renditions import RenditionSpec, SourceProbe

# Environment variable names understood by the worker container
ENV_KEY = "KEY"
ENV_BUCKET = "BUCKET"
ENV_DEST_BUCKET = "PROD_BUCKET"
ENV_REGION = "REGION"
ENV_CREDENTIALS_REF = "CREDENTIALS_REF"


@dataclass(frozen=True)
class JobParameters:
    """Everything a worker needs to run one job. Holds no secret material."""
    source_key: str
    source_bucket: str
    dest_bucket: str
    region: str
    credentials_ref: str = ""

    def to_environment(self) -> dict[str, str]:
        return {
            ENV_KEY: self.source_key,
            ENV_BUCKET: self.source_bucket,
            ENV_DEST_BUCKET: self.dest_bucket,
            ENV_REGION: self.region,
            ENV_CREDENTIALS_REF: self.credentials_ref,
        }

    @classmethod
    def from_environment(cls, environ) -> "JobParameters":
        return cls(
            source_key=environ.get(ENV_KEY, ""),
            source_bucket=environ.get(ENV_BUCKET, ""),
            dest_bucket=environ.get(ENV_DEST_BUCKET, ""),
            region=environ.get(ENV_REGION, ""),
            credentials_ref=environ.get(ENV_CREDENTIALS_REF, ""),
        )

    def as_dict(self) -> dict[str, str]:
        return asdict(self)

    def missing(self) -> list[str]:
        """Names of required parameters that are blank."""
        required = ("source_key", "source_bucket", "dest_bucket", "region")
        return [name for name in required if not getattr(self, name)]


class JobState(str, enum.Enum):
    FETCHING = "FETCHING"
    PROBING = "PROBING"
    PLANNING = "PLANNING"
    ENCODING = "ENCODING"
    UPLOADING = "UPLOADING"
    MANIFEST_BUILDING = "MANIFEST_BUILDING"
    MANIFEST_UPLOADING = "MANIFEST_UPLOADING"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass
class Job:
    source_bucket: str
    source_key: str
    dest_bucket: str
    output_prefix: str
    probe: SourceProbe | None = None
    plan: tuple[RenditionSpec, ...] = ()
    state: JobState = JobState.FETCHING
    # index into plan while ENCODING/UPLOADING
    rendition_index: int | None = None
    published_keys: list[str] = field(default_factory=list)
    error: str = ""
