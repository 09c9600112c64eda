from django.apps import AppConfig


class TranscoderConfig(AppConfig):
    name = "transcoder"
    verbose_name = "HLS transcoder"
