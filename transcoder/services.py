"""Builds dispatcher and worker from Django settings."""
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .aws import get_ecs_client, get_s3_client, get_session, get_sqs_client
from .dispatcher import EventDispatcher
from .encode import HlsEncoder
from .launchers import CeleryLauncher, EcsLauncher
from .probe import SourceProber
from .s3 import ObjectStore
from .sqs import SqsQueue
from .worker import TranscodeWorker


def require(*names: str) -> None:
    missing = [n for n in names if not getattr(settings, n, None)]
    if missing:
        raise ImproperlyConfigured(f"Missing required settings: {', '.join(missing)}")


def build_launcher(session):
    backend = settings.COMPUTE_BACKEND
    if backend == "ecs":
        require("ECS_TASK_DEFINITION", "ECS_CLUSTER", "ECS_SUBNETS")
        return EcsLauncher(
            get_ecs_client(session),
            task_definition=settings.ECS_TASK_DEFINITION,
            cluster=settings.ECS_CLUSTER,
            subnets=settings.ECS_SUBNETS,
            security_groups=settings.ECS_SECURITY_GROUPS,
            container_name=settings.ECS_CONTAINER_NAME,
            assign_public_ip=settings.ECS_ASSIGN_PUBLIC_IP,
        )
    if backend == "celery":
        return CeleryLauncher()
    raise ImproperlyConfigured(f"Unknown COMPUTE_BACKEND {backend!r}; expected 'ecs' or 'celery'")


def build_dispatcher() -> EventDispatcher:
    require("QUEUE_URL", "PROD_BUCKET", "AWS_REGION")
    session = get_session(settings.AWS_REGION, settings.CREDENTIALS_REF)
    return EventDispatcher(
        SqsQueue(get_sqs_client(session), settings.QUEUE_URL),
        build_launcher(session),
        dest_bucket=settings.PROD_BUCKET,
        region=settings.AWS_REGION,
        credentials_ref=settings.CREDENTIALS_REF,
        wait_seconds=settings.SQS_WAIT_SECONDS,
    )


def build_worker(region: str, credentials_ref: str = "") -> TranscodeWorker:
    session = get_session(region or settings.AWS_REGION, credentials_ref)
    return TranscodeWorker(
        ObjectStore(get_s3_client(session, settings.S3_ENDPOINT_URL)),
        SourceProber(settings.FFPROBE_BIN),
        HlsEncoder(
            settings.FFMPEG_BIN,
            segment_seconds=settings.HLS_SEGMENT_SECONDS,
            audio_bitrate=settings.HLS_AUDIO_BITRATE,
        ),
        ingest_prefix=settings.HLS_INGEST_PREFIX,
        upload_concurrency=settings.HLS_UPLOAD_CONCURRENCY,
        allow_empty_plan=settings.HLS_ALLOW_EMPTY_PLAN,
        scratch_root=settings.HLS_SCRATCH_DIR,
    )
