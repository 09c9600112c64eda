import logging
from dataclasses import dataclass

from botocore.exceptions import BotoCoreError, ClientError

from .errors import InfraError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueMessage:
    id: str
    body: str
    ack_token: str  # SQS receipt handle


class SqsQueue:
    def __init__(self, client, queue_url: str):
        self.client = client
        self.queue_url = queue_url

    def receive(self, max_messages: int = 1, wait_seconds: int = 20) -> list[QueueMessage]:
        """
        Long-poll for messages. Blocks for up to wait_seconds and returns an
        empty list when nothing arrived.
        """
        try:
            resp = self.client.receive_message(
                QueueUrl=self.queue_url,
                MaxNumberOfMessages=max_messages,
                WaitTimeSeconds=wait_seconds,
            )
        except (BotoCoreError, ClientError) as e:
            raise InfraError(f"Receive from {self.queue_url} failed: {e}") from e

        return [
            QueueMessage(
                id=m.get("MessageId", ""),
                body=m.get("Body", ""),
                ack_token=m["ReceiptHandle"],
            )
            for m in resp.get("Messages", [])
        ]

    def delete(self, ack_token: str) -> None:
        try:
            self.client.delete_message(QueueUrl=self.queue_url, ReceiptHandle=ack_token)
        except (BotoCoreError, ClientError) as e:
            raise InfraError(f"Delete from {self.queue_url} failed: {e}") from e
