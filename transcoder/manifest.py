from .encode import playlist_filename

HEADER = ("#EXTM3U", "#EXT-X-VERSION:3")


def variant_path(rendition_name: str) -> str:
    """Variant playlist path relative to the master manifest."""
    return f"{rendition_name}/{playlist_filename(rendition_name)}"


def build_master_manifest(plan) -> str:
    """Master playlist listing every rendition of the plan, in plan order."""
    lines = list(HEADER)
    for r in plan:
        lines.append(f"#EXT-X-STREAM-INF:BANDWIDTH={r.bandwidth},RESOLUTION={r.resolution}")
        lines.append(variant_path(r.name))
    return "\n".join(lines) + "\n"
