import re

# Container formats we accept from the ingest bucket
ACCEPTED_EXTENSIONS = frozenset({".mp4", ".mov", ".avi", ".wmv", ".flv", ".webm"})

HLS_ROOT = "hls"

_SLASHES = re.compile(r"/{2,}")


def extension_of(key: str) -> str:
    """Lower-cased extension of the last path component, '' if none."""
    name = key.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[dot:].lower() if dot > 0 else ""


def is_accepted(key: str) -> bool:
    return extension_of(key) in ACCEPTED_EXTENSIONS


def output_prefix(source_key: str, ingest_prefix: str = "videos/") -> str:
    """
    Map a source key to its output prefix.

    Drops everything from the first '.', removes one occurrence of the ingest
    folder marker and collapses doubled separators:
    'videos//clips/demo.mp4' -> '/clips/demo'.
    """
    stem = source_key.split(".", 1)[0]
    if ingest_prefix:
        stem = stem.replace(ingest_prefix, "", 1)
    return _SLASHES.sub("/", stem)


def _join(*parts: str) -> str:
    return _SLASHES.sub("/", "/".join(parts)).lstrip("/")


def rendition_key(prefix: str, rendition_name: str, filename: str) -> str:
    """hls/<prefix>/<rendition>/<filename>"""
    return _join(HLS_ROOT, prefix, rendition_name, filename)


def master_key(prefix: str) -> str:
    return _join(HLS_ROOT, prefix, "master.m3u8")
