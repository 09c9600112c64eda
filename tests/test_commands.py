from io import StringIO
from unittest import mock

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.core.management import call_command
from django.core.management.base import CommandError

from helpers import FakeEncoder, FakeProber, FakeQueue, FakeStore
from transcoder.errors import EncodeError
from transcoder.jobs import JobParameters
from transcoder.renditions import SourceProbe
from transcoder.services import build_dispatcher, build_launcher
from transcoder.tasks import run_transcode_job
from transcoder.worker import TranscodeWorker

JOB_ENV = {
    "KEY": "videos/demo.mp4",
    "BUCKET": "raw",
    "PROD_BUCKET": "prod",
    "REGION": "us-east-1",
    "CREDENTIALS_REF": "",
}


def _fake_worker(encoder=None, store=None):
    return TranscodeWorker(
        store or FakeStore(),
        FakeProber(SourceProbe(duration_seconds=12.0, width=640, height=480)),
        encoder or FakeEncoder(),
    )


def test_transcode_reads_job_parameters_from_environment(monkeypatch):
    for k, v in JOB_ENV.items():
        monkeypatch.setenv(k, v)
    store = FakeStore()
    out = StringIO()
    with mock.patch("transcoder.management.commands.transcode.build_worker", return_value=_fake_worker(store=store)) as build:
        call_command("transcode", stdout=out)

    build.assert_called_once_with("us-east-1", "")
    assert ("prod", "hls/demo/master.m3u8") in store.texts
    assert "Published" in out.getvalue()


def test_transcode_failure_exits_non_zero(monkeypatch):
    for k, v in JOB_ENV.items():
        monkeypatch.setenv(k, v)
    worker = _fake_worker(encoder=FakeEncoder(fail_on={"480p"}))
    with mock.patch("transcoder.management.commands.transcode.build_worker", return_value=worker):
        with pytest.raises(CommandError) as exc:
            call_command("transcode")
    assert exc.value.returncode == 1


def test_transcode_requires_key(monkeypatch):
    for k in JOB_ENV:
        monkeypatch.delenv(k, raising=False)
    with pytest.raises(CommandError, match="source_key"):
        call_command("transcode", "--bucket", "raw", "--dest-bucket", "prod")


def test_dispatch_once(monkeypatch):
    dispatcher = mock.Mock()
    dispatcher.poll_once.return_value = 2
    out = StringIO()
    with mock.patch("transcoder.management.commands.dispatch_uploads.build_dispatcher", return_value=dispatcher):
        call_command("dispatch_uploads", "--once", stdout=out)
    dispatcher.poll_once.assert_called_once_with()
    assert "Launched 2 job(s)" in out.getvalue()


def test_dispatcher_requires_queue_url(settings):
    settings.QUEUE_URL = ""
    with pytest.raises(ImproperlyConfigured, match="QUEUE_URL"):
        build_dispatcher()


def test_unknown_compute_backend(settings):
    settings.COMPUTE_BACKEND = "lambda"
    with pytest.raises(ImproperlyConfigured):
        build_launcher(session=None)


def test_celery_task_runs_worker():
    params = JobParameters(**{
        "source_key": "videos/demo.mp4",
        "source_bucket": "raw",
        "dest_bucket": "prod",
        "region": "us-east-1",
    })
    with mock.patch("transcoder.services.build_worker", return_value=_fake_worker()):
        result = run_transcode_job.apply(args=[params.as_dict()]).get()
    assert result["output_prefix"] == "demo"
    assert result["renditions"] == ["360p", "480p"]


def test_celery_task_propagates_job_failure():
    params = JobParameters("videos/demo.mp4", "raw", "prod", "us-east-1")
    worker = _fake_worker(encoder=FakeEncoder(fail_on={"360p"}))
    with mock.patch("transcoder.services.build_worker", return_value=worker):
        with pytest.raises(EncodeError):
            run_transcode_job.apply(args=[params.as_dict()], throw=True).get()


def test_dispatcher_receives_one_message_regardless_of_settings(settings):
    settings.QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123/uploads"
    settings.PROD_BUCKET = "prod"
    settings.SQS_MAX_MESSAGES = 10
    queue = FakeQueue()
    with mock.patch("transcoder.services.get_session"), \
            mock.patch("transcoder.services.get_sqs_client"), \
            mock.patch("transcoder.services.SqsQueue", return_value=queue), \
            mock.patch("transcoder.services.build_launcher"):
        build_dispatcher().poll_once()
    assert queue.receive_calls == [(1, settings.SQS_WAIT_SECONDS)]


def test_no_auth_app_installed(settings):
    assert "django.contrib.auth" not in settings.INSTALLED_APPS
    assert "django.contrib.contenttypes" in settings.INSTALLED_APPS
