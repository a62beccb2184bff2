"""Shared test fixtures for trackrules."""

import json
from pathlib import Path

import pytest

from trackrules.domain import TrackInfo


def _make_audio_track(
    index: int = 1,
    codec: str | None = "aac",
    channels: int = 2,
    bit_rate: int | None = None,
    language: str = "und",
    title: str = "",
    channel_layout: str = "",
    disposition: dict[str, int] | None = None,
) -> TrackInfo:
    """Create a test audio track."""
    return TrackInfo(
        index=index,
        track_type="audio",
        codec=codec,
        channels=channels,
        bit_rate=bit_rate,
        language=language,
        title=title,
        channel_layout=channel_layout,
        disposition=disposition or {},
    )


def _make_stream(
    index: int,
    track_type: str,
    codec: str | None = None,
) -> TrackInfo:
    """Create a test non-audio stream."""
    return TrackInfo(index=index, track_type=track_type, codec=codec)


def _make_probe_stream(
    index: int,
    codec_type: str = "audio",
    codec_name: str | None = "aac",
    **extra,
) -> dict:
    """Create an ffprobe stream dict."""
    stream = {"index": index, "codec_type": codec_type}
    if codec_name is not None:
        stream["codec_name"] = codec_name
    stream.update(extra)
    return stream


@pytest.fixture
def make_audio_track():
    """Factory fixture for audio tracks."""
    return _make_audio_track


@pytest.fixture
def make_stream():
    """Factory fixture for non-audio streams."""
    return _make_stream


@pytest.fixture
def make_probe_stream():
    """Factory fixture for ffprobe stream dicts."""
    return _make_probe_stream


@pytest.fixture
def sample_rules_document() -> list:
    """A representative rule document."""
    return [
        {
            "name": "Remove commentary",
            "match": {"codecs": "*", "dispositions": {"comment": True}},
            "operations": [],
        },
        {
            "name": "Lossless to AC3 and AAC",
            "match": {"codecs": ["truehd", "dts"], "channels": ">6"},
            "operations": [
                {"copy": {"dispositions": {"default": False}}},
                {
                    "transcode": {
                        "codec": "ac3",
                        "channels": 6,
                        "bitrate": 640000,
                        "title": "{LANG} {o_CODEC} {o_channels_fancy}",
                        "dispositions": {"default": True},
                    }
                },
            ],
        },
    ]


@pytest.fixture
def sample_probe_data() -> dict:
    """ffprobe output for a file with video, three audio and two subtitle streams."""
    return {
        "streams": [
            _make_probe_stream(0, "video", "hevc"),
            _make_probe_stream(
                1,
                codec_name="truehd",
                channels=8,
                channel_layout="7.1",
                tags={"language": "eng", "title": "TrueHD Atmos 7.1"},
                disposition={"default": 1, "comment": 0},
            ),
            _make_probe_stream(
                2,
                codec_name="ac3",
                channels=2,
                bit_rate="192000",
                tags={"language": "eng", "title": "Commentary"},
                disposition={"default": 0, "comment": 1},
            ),
            _make_probe_stream(
                3,
                codec_name="aac",
                channels=2,
                bit_rate="128000",
                tags={"language": "fre"},
                disposition={"default": 0, "comment": 0},
            ),
            _make_probe_stream(4, "subtitle", "subrip", tags={"language": "eng"}),
            _make_probe_stream(5, "subtitle", None),
        ],
        "format": {
            "filename": "/media/movie.mkv",
            "format_name": "matroska,webm",
            "tags": {"COPYRIGHT": ""},
        },
    }


@pytest.fixture
def rules_file(tmp_path: Path, sample_rules_document: list) -> Path:
    """Write the sample rule document to a JSON file."""
    path = tmp_path / "rules.json"
    path.write_text(json.dumps(sample_rules_document))
    return path


@pytest.fixture
def probe_file(tmp_path: Path, sample_probe_data: dict) -> Path:
    """Write the sample probe data to a JSON file."""
    path = tmp_path / "probe.json"
    path.write_text(json.dumps(sample_probe_data))
    return path
