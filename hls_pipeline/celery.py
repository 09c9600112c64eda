"""Celery app for the local compute backend (COMPUTE_BACKEND=celery)."""
import os
from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hls_pipeline.settings")

celery_app = Celery("hls_pipeline")
celery_app.config_from_object("django.conf:settings", namespace="CELERY")
celery_app.autodiscover_tasks(["transcoder"])
