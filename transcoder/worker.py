"""
Transcode worker: one job per process run.

    FETCHING -> PROBING -> PLANNING -> (ENCODING -> UPLOADING) per rendition
    -> MANIFEST_BUILDING -> MANIFEST_UPLOADING -> DONE

Any failure moves the job to FAILED and re-raises. Renditions encode one at a
time; the files of a rendition upload concurrently and must all succeed
before the next rendition starts. The master manifest is written last, so its
absence means the asset is incomplete. Renditions uploaded before a failure
stay published.
"""
import logging
import tempfile
from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path

from .errors import MediaError, UploadError
from .jobs import Job, JobParameters, JobState
from .keys import master_key, output_prefix, rendition_key
from .manifest import build_master_manifest
from .renditions import RENDITION_CATALOG, plan

logger = logging.getLogger(__name__)


class TranscodeWorker:
    def __init__(
        self,
        store,
        prober,
        encoder,
        *,
        catalog=RENDITION_CATALOG,
        ingest_prefix: str = "videos/",
        upload_concurrency: int = 8,
        allow_empty_plan: bool = False,
        scratch_root=None,
    ):
        self.store = store
        self.prober = prober
        self.encoder = encoder
        self.catalog = tuple(catalog)
        self.ingest_prefix = ingest_prefix
        self.upload_concurrency = max(1, upload_concurrency)
        self.allow_empty_plan = allow_empty_plan
        self.scratch_root = scratch_root
        self.last_job: Job | None = None

    def run(self, params: JobParameters) -> Job:
        job = self.last_job = Job(
            source_bucket=params.source_bucket,
            source_key=params.source_key,
            dest_bucket=params.dest_bucket,
            output_prefix=output_prefix(params.source_key, self.ingest_prefix),
        )
        logger.info(
            "Job start s3://%s/%s -> s3://%s/%s",
            job.source_bucket, job.source_key, job.dest_bucket, master_key(job.output_prefix),
        )
        # scratch is removed on every exit path
        with tempfile.TemporaryDirectory(prefix="hls-job-", dir=self.scratch_root) as scratch:
            try:
                self._run(job, Path(scratch))
            except Exception as e:
                self._fail(job, e)
                raise
        return job

    def _run(self, job: Job, scratch: Path) -> None:
        self._enter(job, JobState.FETCHING)
        source = self.store.download(
            job.source_bucket, job.source_key, scratch / f"source{Path(job.source_key).suffix}"
        )

        self._enter(job, JobState.PROBING)
        job.probe = self.prober.probe(source)

        self._enter(job, JobState.PLANNING)
        job.plan = plan(self.catalog, job.probe)
        logger.info("Plan for %s: %s", job.source_key, [r.name for r in job.plan] or "(empty)")
        if not job.plan and not self.allow_empty_plan:
            raise MediaError(f"No rendition fits a {job.probe.width}x{job.probe.height} source")

        for i, rendition in enumerate(job.plan):
            job.rendition_index = i
            self._enter(job, JobState.ENCODING)
            output = self.encoder.encode(
                source, rendition, scratch / rendition.name, job.probe.duration_seconds
            )

            self._enter(job, JobState.UPLOADING)
            self._upload_rendition(job, output)
        job.rendition_index = None

        self._enter(job, JobState.MANIFEST_BUILDING)
        manifest = build_master_manifest(job.plan)

        self._enter(job, JobState.MANIFEST_UPLOADING)
        key = self.store.put_text(job.dest_bucket, master_key(job.output_prefix), manifest)
        job.published_keys.append(key)

        self._enter(job, JobState.DONE)
        logger.info("Job done for %s: %d objects published", job.source_key, len(job.published_keys))

    def _upload_rendition(self, job: Job, output) -> None:
        """Upload every file of one rendition in parallel; all must succeed."""
        name = output.rendition.name
        keys = {p: rendition_key(job.output_prefix, name, p.name) for p in output.files}
        with ThreadPoolExecutor(max_workers=min(self.upload_concurrency, len(keys))) as pool:
            futures = [pool.submit(self.store.upload_file, p, job.dest_bucket, k) for p, k in keys.items()]
            wait(futures)

        failed = [f.exception() for f in futures if f.exception() is not None]
        job.published_keys.extend(f.result() for f in futures if f.exception() is None)
        if failed:
            first = failed[0]
            if isinstance(first, UploadError):
                raise first
            raise UploadError(f"{name}/*", str(first)) from first
        logger.info("Uploaded rendition %s (%d files)", name, len(keys))

    def _enter(self, job: Job, state: JobState) -> None:
        job.state = state
        if job.rendition_index is not None and state in (JobState.ENCODING, JobState.UPLOADING):
            logger.debug("%s: %s(%d)", job.source_key, state.value, job.rendition_index)
        else:
            logger.debug("%s: %s", job.source_key, state.value)

    def _fail(self, job: Job, exc: BaseException) -> None:
        failed_in = job.state
        job.state = JobState.FAILED
        job.error = str(exc)
        logger.error(
            "Job failed in %s for s3://%s/%s: %s",
            failed_in.value, job.source_bucket, job.source_key, exc,
        )
