"""
Dispatcher: SQS upload notifications -> one transcode job per accepted record.

Single consumer, one message per long-poll. Acknowledgement is per message:
a message is deleted once, after all of its records were handled, if at least
one job was launched and no launch failed. Everything else is left for the
queue to redeliver (and eventually dead-letter). Delivery is at-least-once;
re-running a job overwrites the same output keys.
"""
import logging

from .errors import InfraError, ValidationError
from .events import TestEvent, parse_message, validate_record
from .jobs import JobParameters

logger = logging.getLogger(__name__)

# one message per receive; each is fully handled before the next poll
MAX_MESSAGES = 1


class EventDispatcher:
    def __init__(
        self,
        queue,
        launcher,
        *,
        dest_bucket: str,
        region: str,
        credentials_ref: str = "",
        wait_seconds: int = 20,
    ):
        self.queue = queue
        self.launcher = launcher
        self.dest_bucket = dest_bucket
        self.region = region
        self.credentials_ref = credentials_ref
        self.wait_seconds = wait_seconds

    def run(self) -> None:
        """Poll forever. The long-poll receive is the only wait in the loop."""
        logger.info("Dispatcher polling %s", getattr(self.queue, "queue_url", self.queue))
        while True:
            self.poll_once()

    def poll_once(self) -> int:
        """One receive cycle. Returns the number of jobs launched."""
        try:
            messages = self.queue.receive(max_messages=MAX_MESSAGES, wait_seconds=self.wait_seconds)
        except InfraError as e:
            logger.error("Receive failed: %s", e)
            return 0

        if not messages:
            logger.debug("No messages found")
            return 0

        return sum(self.handle_message(m) for m in messages)

    def handle_message(self, message) -> int:
        logger.info("Message received id=%s", message.id)
        try:
            return self._handle(message)
        except Exception:
            logger.exception("Unexpected error handling id=%s; leaving it for redelivery", message.id)
            return 0

    def _handle(self, message) -> int:
        try:
            parsed = parse_message(message.body)
        except ValidationError as e:
            # left un-acknowledged; the queue redelivers or dead-letters it
            logger.warning("Rejected message id=%s: %s", message.id, e)
            return 0

        if isinstance(parsed, TestEvent):
            logger.info("Test event from %s, acknowledging id=%s", parsed.service, message.id)
            self._ack(message)
            return 0

        launched = 0
        launch_failed = False
        for n, raw in enumerate(parsed):
            try:
                record = validate_record(raw)
            except ValidationError as e:
                logger.warning("Skipping record %d of id=%s: %s", n, message.id, e)
                continue

            params = JobParameters(
                source_key=record.key,
                source_bucket=record.bucket,
                dest_bucket=self.dest_bucket,
                region=self.region,
                credentials_ref=self.credentials_ref,
            )
            try:
                handle = self.launcher.launch(params)
            except InfraError as e:
                logger.error("Launch failed for s3://%s/%s: %s", record.bucket, record.key, e)
                launch_failed = True
                continue
            logger.info("Dispatched s3://%s/%s as %s", record.bucket, record.key, handle)
            launched += 1

        if launched and not launch_failed:
            self._ack(message)
        elif launch_failed:
            logger.warning("Leaving id=%s for redelivery after a launch failure", message.id)
        else:
            logger.warning("No record of id=%s was dispatched; leaving it for redelivery", message.id)
        return launched

    def _ack(self, message) -> None:
        try:
            self.queue.delete(message.ack_token)
        except InfraError as e:
            logger.error("Delete failed for id=%s: %s", message.id, e)
