import logging

from django.core.management.base import BaseCommand

from transcoder.services import build_dispatcher

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Consume S3 upload notifications from SQS and launch one transcode job per upload."

    def add_arguments(self, parser):
        parser.add_argument(
            "--once",
            action="store_true",
            help="Run a single receive cycle and exit (smoke testing).",
        )

    def handle(self, *args, **options):
        # ImproperlyConfigured propagates: the only fatal path for the loop
        dispatcher = build_dispatcher()
        if options["once"]:
            launched = dispatcher.poll_once()
            self.stdout.write(f"Launched {launched} job(s)")
            return
        try:
            dispatcher.run()
        except KeyboardInterrupt:
            logger.info("Dispatcher stopped")
