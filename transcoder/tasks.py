import logging

from celery import shared_task

from .errors import PipelineError
from .jobs import JobParameters

logger = logging.getLogger(__name__)


@shared_task(bind=True)
def run_transcode_job(self, params: dict):
    """
    Celery entry point for one transcode job (COMPUTE_BACKEND=celery).
    Broker redelivery plays the role of SQS redelivery; failures re-raise so
    Celery records the task as failed.
    """
    from .services import build_worker

    job_params = JobParameters(**params)
    missing = job_params.missing()
    if missing:
        raise ValueError(f"Missing job parameters: {', '.join(missing)}")

    worker = build_worker(job_params.region, job_params.credentials_ref)
    try:
        job = worker.run(job_params)
    except PipelineError:
        logger.exception("Transcode task %s failed for %s", self.request.id, job_params.source_key)
        raise

    return {
        "source_key": job.source_key,
        "output_prefix": job.output_prefix,
        "renditions": [r.name for r in job.plan],
        "published": len(job.published_keys),
    }
