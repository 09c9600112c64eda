import logging
from pathlib import Path

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from .errors import InfraError, UploadError

logger = logging.getLogger(__name__)

PLAYLIST_CONTENT_TYPE = "application/vnd.apple.mpegurl"
SEGMENT_CONTENT_TYPE = "video/MP2T"


def content_type_for(path) -> str | None:
    """Minimal content-type hints for HLS assets."""
    suf = Path(path).suffix.lower()
    if suf == ".m3u8":
        return PLAYLIST_CONTENT_TYPE
    if suf in (".ts", ".m2ts"):
        return SEGMENT_CONTENT_TYPE
    return None


class ObjectStore:
    """
    Thin wrapper over an S3 client. boto3 clients are thread-safe, so one
    store can serve concurrent uploads.
    """

    def __init__(self, client):
        self.client = client

    def download(self, bucket: str, key: str, dest) -> Path:
        """Fetch bucket/key to the local path dest."""
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        try:
            self.client.download_file(bucket, key, str(dest))
        except (BotoCoreError, ClientError, OSError) as e:
            raise InfraError(f"Download of s3://{bucket}/{key} failed: {e}") from e
        logger.info("Fetched s3://%s/%s (%d bytes)", bucket, key, dest.stat().st_size)
        return dest

    def upload_file(self, local_path, bucket: str, key: str) -> str:
        """Upload a single file with an HLS content-type hint when one applies."""
        extra = {}
        content_type = content_type_for(local_path)
        if content_type:
            extra["ContentType"] = content_type
        try:
            self.client.upload_file(str(local_path), bucket, key, ExtraArgs=extra or None)
        except (S3UploadFailedError, BotoCoreError, ClientError, OSError) as e:
            raise UploadError(key, str(e)) from e
        logger.debug("Uploaded %s -> s3://%s/%s", local_path, bucket, key)
        return key

    def put_text(self, bucket: str, key: str, body: str, content_type: str = PLAYLIST_CONTENT_TYPE) -> str:
        try:
            self.client.put_object(
                Bucket=bucket,
                Key=key,
                Body=body.encode("utf-8"),
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            raise UploadError(key, str(e)) from e
        logger.info("Published s3://%s/%s", bucket, key)
        return key
