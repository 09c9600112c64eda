"""
Validation of S3 upload notifications delivered through SQS.

A message body is either an S3 test event (acknowledged without work) or a
notification with one or more records. Each record is validated separately.
"""
import json
import logging
from dataclasses import dataclass
from urllib.parse import unquote_plus

from .errors import ValidationError
from .keys import extension_of, is_accepted
from .serializers import (
    TEST_EVENT,
    S3NotificationSerializer,
    S3RecordSerializer,
    S3TestEventSerializer,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TestEvent:
    __test__ = False  # not a pytest class

    service: str
    event: str


@dataclass(frozen=True)
class IngestRecord:
    bucket: str
    key: str


def parse_message(body):
    """
    Parse a queue message body.

    Returns a TestEvent, or the raw list of record dicts to be passed to
    validate_record(). Raises ValidationError for anything else.
    """
    if not body:
        raise ValidationError("Empty message body")
    try:
        payload = json.loads(body)
    except (TypeError, ValueError, RecursionError) as e:
        raise ValidationError(f"Message body is not JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ValidationError("Message body is not a JSON object")

    # other control events fall through to the notification shape
    if payload.get("Event") == TEST_EVENT:
        ser = S3TestEventSerializer(data=payload)
        if not ser.is_valid():
            raise ValidationError(f"Unsupported control event: {ser.errors}")
        return TestEvent(service=ser.validated_data["Service"], event=ser.validated_data["Event"])

    ser = S3NotificationSerializer(data=payload)
    if not ser.is_valid():
        raise ValidationError(f"Not an S3 notification: {ser.errors}")
    return ser.validated_data["Records"]


def validate_record(record) -> IngestRecord:
    """Turn one notification record into an IngestRecord or raise ValidationError."""
    ser = S3RecordSerializer(data=record)
    if not ser.is_valid():
        raise ValidationError(f"Invalid record: {ser.errors}")

    s3 = ser.validated_data["s3"]
    bucket = s3["bucket"]["name"]
    # Object keys arrive URL-encoded in S3 notifications
    key = unquote_plus(s3["object"]["key"])
    if not key.strip():
        raise ValidationError("Record has a blank object key")

    if not is_accepted(key):
        raise ValidationError(f"Unsupported container format {extension_of(key) or '(none)'!r} for {key}")

    return IngestRecord(bucket=bucket, key=key)
