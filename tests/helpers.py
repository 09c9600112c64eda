"""Shared fakes and builders for the pipeline tests."""
import json
import threading
from pathlib import Path

from transcoder.encode import RenditionOutput, collect_output, segment_filename, segment_padding
from transcoder.errors import EncodeError, InfraError, UploadError
from transcoder.renditions import SourceProbe
from transcoder.sqs import QueueMessage


def make_s3_event_body(*records) -> str:
    """S3 event notification JSON for (bucket, key) pairs."""
    return json.dumps({
        "Records": [
            {"s3": {"bucket": {"name": bucket}, "object": {"key": key}}}
            for bucket, key in records
        ]
    })


def make_message(body: str, n: int = 1) -> QueueMessage:
    return QueueMessage(id=f"msg-{n}", body=body, ack_token=f"receipt-{n}")


class FakeQueue:
    def __init__(self, batches=(), receive_error=None, delete_error=None):
        self.batches = list(batches)
        self.receive_error = receive_error
        self.delete_error = delete_error
        self.receive_calls = []
        self.deleted = []

    def receive(self, max_messages=1, wait_seconds=20):
        self.receive_calls.append((max_messages, wait_seconds))
        if self.receive_error:
            raise self.receive_error
        return self.batches.pop(0) if self.batches else []

    def delete(self, ack_token):
        if self.delete_error:
            raise self.delete_error
        self.deleted.append(ack_token)


class FakeLauncher:
    def __init__(self, fail_keys=()):
        self.fail_keys = set(fail_keys)
        self.launched = []

    def launch(self, params):
        if params.source_key in self.fail_keys:
            raise InfraError(f"cannot launch {params.source_key}")
        self.launched.append(params)
        return f"task-{len(self.launched)}"


class FakeStore:
    def __init__(self, fail_download=False, fail_upload_names=(), fail_manifest=False):
        self.fail_download = fail_download
        self.fail_upload_names = set(fail_upload_names)
        self.fail_manifest = fail_manifest
        self.downloads = []
        self.uploads = []
        self.texts = {}
        self._lock = threading.Lock()

    def download(self, bucket, key, dest):
        if self.fail_download:
            raise InfraError(f"NoSuchKey: {key}")
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(b"\x00fake-video")
        self.downloads.append((bucket, key))
        return dest

    def upload_file(self, local_path, bucket, key):
        if Path(local_path).name in self.fail_upload_names:
            raise UploadError(key, "AccessDenied")
        with self._lock:
            self.uploads.append((bucket, key))
        return key

    def put_text(self, bucket, key, body, content_type="application/vnd.apple.mpegurl"):
        if self.fail_manifest:
            raise UploadError(key, "SlowDown")
        self.texts[(bucket, key)] = body
        return key

    @property
    def uploaded_keys(self):
        return {key for _, key in self.uploads} | {key for _, key in self.texts}


class FakeProber:
    def __init__(self, probe=SourceProbe(duration_seconds=25.0, width=1920, height=1080), error=None):
        self.result = probe
        self.error = error
        self.calls = []

    def probe(self, path):
        self.calls.append(Path(path))
        if self.error:
            raise self.error
        return self.result


class FakeEncoder:
    """Writes a playlist and segments the way ffmpeg would."""

    def __init__(self, fail_on=(), segment_seconds=10):
        self.fail_on = set(fail_on)
        self.segment_seconds = segment_seconds
        self.encoded = []

    def encode(self, source, rendition, out_dir, duration_seconds) -> RenditionOutput:
        self.encoded.append(rendition.name)
        if rendition.name in self.fail_on:
            raise EncodeError(rendition.name, 1, "Conversion failed!")
        out_dir = Path(out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        padding = segment_padding(duration_seconds, self.segment_seconds)
        count = max(1, -(-int(duration_seconds) // self.segment_seconds))
        for i in range(count):
            (out_dir / segment_filename(rendition.name, i, padding)).write_bytes(b"ts")
        (out_dir / f"{rendition.name}.m3u8").write_text("#EXTM3U\n")
        return collect_output(out_dir, rendition)
