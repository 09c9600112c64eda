from pathlib import Path
import os
from dotenv import load_dotenv
from django.core.exceptions import ImproperlyConfigured

# -----------------------------------------------------
# Helpers
# -----------------------------------------------------
def env(name: str, default=None, *, required: bool = False):
    val = os.getenv(name, default)
    if required and (val is None or (isinstance(val, str) and val.strip() == "")):
        raise ImproperlyConfigured(f"Missing required environment variable: {name}")
    return val

def env_bool(name: str, default: bool = False) -> bool:
    return str(os.getenv(name, str(default))).lower() in {"1", "true", "yes", "on"}

def env_list(name: str) -> list[str]:
    return [v.strip() for v in os.getenv(name, "").split(",") if v.strip()]

# -----------------------------------------------------
# Paths & basics
# -----------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

DEBUG = env_bool("DEBUG", False)

# No HTTP surface; Django only hosts settings, management commands and Celery
SECRET_KEY = env("DJANGO_SECRET_KEY", "hls-pipeline-no-web-surface")

ALLOWED_HOSTS: list[str] = []

# -----------------------------------------------------
# Applications
# -----------------------------------------------------
INSTALLED_APPS = [
    "django.contrib.contenttypes",

    # Third-party
    "rest_framework",

    # Local
    "transcoder",
]

# No job database: jobs are owned by one worker process and never persisted
DATABASES: dict = {}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

# -----------------------------------------------------
# Logging
# -----------------------------------------------------
LOG_LEVEL = env("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "console": {
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            "datefmt": "%Y-%m-%dT%H:%M:%S%z",
        },
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "console"},
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        # botocore is chatty at DEBUG
        "botocore": {"level": "WARNING"},
        "urllib3": {"level": "WARNING"},
    },
}

# -----------------------------------------------------
# Celery / Redis (local compute backend)
# -----------------------------------------------------
CELERY_BROKER_URL = env("CELERY_BROKER_URL", "redis://127.0.0.1:6379/0")
CELERY_RESULT_BACKEND = env("CELERY_RESULT_BACKEND", "redis://127.0.0.1:6379/0")
CELERY_TASK_TRACK_STARTED = True
CELERY_TASK_TIME_LIMIT = int(env("CELERY_TASK_TIME_LIMIT", str(60 * 60)))  # seconds
# One job at a time per worker process; renditions already encode sequentially
CELERY_WORKER_PREFETCH_MULTIPLIER = 1
CELERY_TASK_ACKS_LATE = True
CELERY_TASK_DEFAULT_QUEUE = env("CELERY_TASK_DEFAULT_QUEUE", "transcode")

# -----------------------------------------------------
# AWS (env-driven; credentials come from the default chain or a named profile)
# -----------------------------------------------------
AWS_REGION = env("AWS_REGION", env("REGION", "us-east-1"))
# Name of an AWS profile resolved inside each process; never secret material
CREDENTIALS_REF = env("CREDENTIALS_REF", "")
S3_ENDPOINT_URL = os.getenv("S3_ENDPOINT_URL") or None  # e.g. http://127.0.0.1:9000 for MinIO
PROD_BUCKET = env("PROD_BUCKET", "")

# -----------------------------------------------------
# Dispatcher (SQS -> compute dispatch)
# -----------------------------------------------------
QUEUE_URL = env("QUEUE_URL", "")
SQS_WAIT_SECONDS = int(env("SQS_WAIT_SECONDS", "20"))

COMPUTE_BACKEND = env("COMPUTE_BACKEND", "ecs").lower()  # "ecs" | "celery"

ECS_TASK_DEFINITION = env("ECS_TASK_DEFINITION", env("TASK_DEFINITION_ARN", ""))
ECS_CLUSTER = env("ECS_CLUSTER", env("CLUSTER_ARN", ""))
ECS_SUBNETS = env_list("ECS_SUBNETS") or env_list("SUBNETS")
ECS_SECURITY_GROUPS = env_list("ECS_SECURITY_GROUPS") or env_list("SECURITY_GROUP")
ECS_CONTAINER_NAME = env("ECS_CONTAINER_NAME", "video-transcoder")
ECS_ASSIGN_PUBLIC_IP = env_bool("ECS_ASSIGN_PUBLIC_IP", True)

# -----------------------------------------------------
# Transcoding
# -----------------------------------------------------
HLS_INGEST_PREFIX = env("HLS_INGEST_PREFIX", "videos/")
HLS_SEGMENT_SECONDS = int(env("HLS_SEGMENT_SECONDS", "10"))
HLS_AUDIO_BITRATE = env("HLS_AUDIO_BITRATE", "128k")
HLS_UPLOAD_CONCURRENCY = int(env("HLS_UPLOAD_CONCURRENCY", "8"))
HLS_ALLOW_EMPTY_PLAN = env_bool("HLS_ALLOW_EMPTY_PLAN", False)
HLS_SCRATCH_DIR = os.getenv("HLS_SCRATCH_DIR") or None  # None -> system temp dir

FFMPEG_BIN = env("FFMPEG_BIN", "ffmpeg")
FFPROBE_BIN = env("FFPROBE_BIN", "ffprobe")
