"""
Compute-dispatch backends. Each launcher starts one isolated transcode job
for a JobParameters and returns a handle, or raises InfraError.
"""
import logging

from botocore.exceptions import BotoCoreError, ClientError

from .errors import InfraError
from .jobs import JobParameters

logger = logging.getLogger(__name__)


class EcsLauncher:
    """Runs the worker container as a Fargate task, one task per job."""

    def __init__(
        self,
        client,
        *,
        task_definition: str,
        cluster: str,
        subnets,
        security_groups,
        container_name: str = "video-transcoder",
        assign_public_ip: bool = True,
    ):
        self.client = client
        self.task_definition = task_definition
        self.cluster = cluster
        self.subnets = list(subnets)
        self.security_groups = list(security_groups)
        self.container_name = container_name
        self.assign_public_ip = assign_public_ip

    def launch(self, params: JobParameters) -> str:
        environment = [{"name": k, "value": v} for k, v in params.to_environment().items()]
        try:
            resp = self.client.run_task(
                taskDefinition=self.task_definition,
                cluster=self.cluster,
                launchType="FARGATE",
                count=1,
                networkConfiguration={
                    "awsvpcConfiguration": {
                        "subnets": self.subnets,
                        "securityGroups": self.security_groups,
                        "assignPublicIp": "ENABLED" if self.assign_public_ip else "DISABLED",
                    }
                },
                overrides={
                    "containerOverrides": [
                        {"name": self.container_name, "environment": environment},
                    ]
                },
            )
        except (BotoCoreError, ClientError) as e:
            raise InfraError(f"RunTask for {params.source_key} failed: {e}") from e

        tasks = resp.get("tasks") or []
        if not tasks:
            reasons = ", ".join(
                f"{f.get('arn', '?')}: {f.get('reason', 'unknown')}" for f in resp.get("failures") or []
            )
            raise InfraError(f"RunTask for {params.source_key} started no task ({reasons or 'no reason given'})")

        task_arn = tasks[0].get("taskArn", "")
        logger.info("Launched ECS task %s for s3://%s/%s", task_arn, params.source_bucket, params.source_key)
        return task_arn


class CeleryLauncher:
    """Enqueues the job on the Celery broker; for local stacks without ECS."""

    def __init__(self, task=None):
        if task is None:
            from .tasks import run_transcode_job
            task = run_transcode_job
        self.task = task

    def launch(self, params: JobParameters) -> str:
        try:
            result = self.task.delay(params.as_dict())
        except Exception as e:
            # kombu raises transport-specific errors (OperationalError, redis errors, ...)
            raise InfraError(f"Enqueue for {params.source_key} failed: {e}") from e
        logger.info("Enqueued Celery task %s for s3://%s/%s", result.id, params.source_bucket, params.source_key)
        return result.id
