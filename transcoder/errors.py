"""
Pipeline error types.

ValidationError and InfraError are survivable for the dispatcher loop.
MediaError and UploadError are fatal to the current transcode job only.
"""


class PipelineError(Exception):
    """Base exception for all pipeline failures."""


class ValidationError(PipelineError):
    """Malformed notification payload, missing bucket/key, or disallowed extension."""


class InfraError(PipelineError):
    """A queue, object-store or compute-dispatch call failed."""


class MediaError(PipelineError):
    """The source could not be probed or a rendition could not be encoded."""


class ProbeError(MediaError):
    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot probe {self.path}: {reason}")


class EncodeError(MediaError):
    def __init__(self, rendition: str, returncode: int, stderr: str = ""):
        self.rendition = rendition
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Encoding {rendition} failed with exit code {returncode}")


class UploadError(PipelineError):
    """Publishing a file to the destination bucket failed."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Upload of {key} failed: {reason}")
