import logging
import os

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from transcoder.errors import PipelineError
from transcoder.jobs import JobParameters
from transcoder.services import build_worker

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = (
        "Transcode one source object into HLS renditions and a master manifest. "
        "Parameters default to the KEY, BUCKET, PROD_BUCKET, REGION and "
        "CREDENTIALS_REF environment variables set by the dispatcher."
    )

    def add_arguments(self, parser):
        parser.add_argument("--key", help="Source object key")
        parser.add_argument("--bucket", help="Source bucket")
        parser.add_argument("--dest-bucket", help="Destination bucket")
        parser.add_argument("--region", help="AWS region")
        parser.add_argument("--credentials-ref", help="AWS profile name")

    def handle(self, *args, **options):
        from_env = JobParameters.from_environment(os.environ)
        params = JobParameters(
            source_key=options["key"] or from_env.source_key,
            source_bucket=options["bucket"] or from_env.source_bucket,
            dest_bucket=options["dest_bucket"] or from_env.dest_bucket or settings.PROD_BUCKET,
            region=options["region"] or from_env.region or settings.AWS_REGION,
            credentials_ref=options["credentials_ref"] or from_env.credentials_ref,
        )
        missing = params.missing()
        if missing:
            raise CommandError(f"Missing job parameters: {', '.join(missing)}", returncode=1)

        worker = build_worker(params.region, params.credentials_ref)
        try:
            job = worker.run(params)
        except PipelineError as e:
            raise CommandError(f"Transcode failed: {e}", returncode=1) from e

        self.stdout.write(
            self.style.SUCCESS(
                f"Published {len(job.published_keys)} objects for {job.source_key} "
                f"({', '.join(r.name for r in job.plan) or 'no renditions'})"
            )
        )
