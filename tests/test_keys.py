import pytest

from transcoder.keys import extension_of, is_accepted, master_key, output_prefix, rendition_key


def test_output_prefix_strips_ingest_folder_and_extension():
    assert output_prefix("videos//clips/demo.mp4") == "/clips/demo"


@pytest.mark.parametrize(
    "key,expected",
    [
        ("videos/demo.mp4", "demo"),
        ("videos/demo.final.mov", "demo"),
        ("uploads/videos/a/b.webm", "uploads/a/b"),
        ("clips/demo.MP4", "clips/demo"),
        ("no-extension", "no-extension"),
        ("a//b///c.avi", "a/b/c"),
    ],
)
def test_output_prefix(key, expected):
    assert output_prefix(key) == expected


def test_output_prefix_removes_only_one_marker():
    assert output_prefix("videos/videos/x.mp4") == "videos/x"


def test_output_prefix_is_deterministic_and_idempotent():
    first = output_prefix("videos/team/launch.mp4")
    assert first == output_prefix("videos/team/launch.mp4")
    assert output_prefix(first) == first


def test_output_prefix_custom_marker():
    assert output_prefix("incoming/show/ep1.mkv", ingest_prefix="incoming/") == "show/ep1"


@pytest.mark.parametrize("key", ["a.mp4", "b.MOV", "c.Avi", "d.wmv", "e.flv", "f.webm", "dir.x/clip.mp4"])
def test_accepted_extensions(key):
    assert is_accepted(key)


@pytest.mark.parametrize("key", ["a.mkv", "b.txt", "noext", ".mp4", "dir.mp4/clip", "clip.mp4.part"])
def test_rejected_extensions(key):
    assert not is_accepted(key)


def test_extension_of_uses_last_component():
    assert extension_of("some.dir/clip.final.MOV") == ".mov"


def test_key_builders_never_double_slash():
    prefix = output_prefix("videos//clips/demo.mp4")
    assert rendition_key(prefix, "720p", "720p_00.ts") == "hls/clips/demo/720p/720p_00.ts"
    assert master_key(prefix) == "hls/clips/demo/master.m3u8"
