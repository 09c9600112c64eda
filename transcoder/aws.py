import boto3
from botocore.config import Config as BotoConfig

# botocore's standard retry mode backs off on throttling and transient errors
_RETRIES = {"mode": "standard", "max_attempts": 5}


def get_session(region: str, credentials_ref: str | None = None):
    """
    Session for the given region. credentials_ref names an AWS profile; when it
    is empty the default chain is used (env vars, task role, instance profile).
    """
    return boto3.session.Session(
        profile_name=credentials_ref or None,
        region_name=region,
    )


def get_s3_client(session, endpoint_url: str | None = None):
    """SDK client for server-side upload/download."""
    return session.client(
        "s3",
        endpoint_url=endpoint_url,  # e.g. http://127.0.0.1:9000 for MinIO
        config=BotoConfig(
            s3={"addressing_style": "path"},
            signature_version="s3v4",
            retries=_RETRIES,
        ),
    )


def get_sqs_client(session):
    # read timeout must outlast the 20s long-poll
    return session.client("sqs", config=BotoConfig(read_timeout=60, retries=_RETRIES))


def get_ecs_client(session):
    return session.client("ecs", config=BotoConfig(retries=_RETRIES))
