"""Tests for the addon stream parser."""

from __future__ import annotations

from typing import Any

import pytest

from debridplay.domain.entities.quality import Resolution, SourceQuality
from debridplay.infrastructure.streaming.stream_parser import (
    _format_size,
    construct_magnet,
    detect_cached,
    extract_hash,
    extract_size,
    parse_resolution,
    parse_source_quality,
    parse_stream,
    parse_streams,
)

# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class TestParseResolution:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Iron.Man.2008.1080p.BluRay.x264", Resolution.FHD_1080P),
            ("Iron.Man.2008.2160p.BluRay.REMUX.HEVC", Resolution.UHD_4K),
            ("Iron.Man.2008.720p.WEB-DL", Resolution.HD_720P),
            ("Torrentio\n480p", Resolution.SD_480P),
        ],
    )
    def test_detects_resolution(self, text: str, expected: Resolution) -> None:
        assert parse_resolution(text) is expected

    def test_empty(self) -> None:
        assert parse_resolution(None) is None
        assert parse_resolution("") is None


# ---------------------------------------------------------------------------
# Source quality
# ---------------------------------------------------------------------------


class TestParseSourceQuality:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Movie.2020.2160p.BluRay.REMUX.HEVC", SourceQuality.BLURAY_REMUX),
            ("Movie.2020.1080p.BluRay.x264", SourceQuality.BLURAY),
            ("Movie.2020.1080p.BDRip.x264", SourceQuality.BLURAY),
            ("Movie.2020.1080p.WEB-DL.DDP5.1", SourceQuality.WEB_DL),
            ("Movie.2020.1080p.WEBRip.x264", SourceQuality.WEBRIP),
            ("Show.S01E01.720p.HDTV.x264", SourceQuality.HDTV),
            ("Movie.2020.DVDRip.XviD", SourceQuality.DVDRIP),
            ("Movie.2020.720p.HDRip.x264", SourceQuality.HDRIP),
            ("Movie.2020.HDCAM.x264", SourceQuality.CAM),
            ("Movie.2020.TELESYNC.x264", SourceQuality.TS),
        ],
    )
    def test_detects_source_quality(self, text: str, expected: SourceQuality) -> None:
        assert parse_source_quality(text) is expected

    def test_remux_wins_over_bluray(self) -> None:
        assert (
            parse_source_quality("Movie BluRay REMUX 1080p")
            is SourceQuality.BLURAY_REMUX
        )

    def test_empty(self) -> None:
        assert parse_source_quality(None) is None
        assert parse_source_quality("") is None


# ---------------------------------------------------------------------------
# Cached detection, hash, size, magnet
# ---------------------------------------------------------------------------


class TestDetectCached:
    @pytest.mark.parametrize(
        "stream",
        [
            {"name": "[RD+] Torrentio"},
            {"name": "Comet Instant"},
            {"name": "AIO ⚡"},
            {"name": "AIO", "description": "✅ ready"},
        ],
    )
    def test_cached(self, stream: dict[str, Any]) -> None:
        assert detect_cached(stream) is True

    @pytest.mark.parametrize(
        "stream",
        [
            {"name": "[RD download] Torrentio"},
            {"name": "Torrentio", "description": "1080p"},
            {},
        ],
    )
    def test_not_cached(self, stream: dict[str, Any]) -> None:
        assert detect_cached(stream) is False


class TestExtractHash:
    def test_info_hash_lowercased(self) -> None:
        stream = {"infoHash": "ABCDEF0123456789ABCDEF0123456789ABCDEF01"}
        assert extract_hash(stream) == "abcdef0123456789abcdef0123456789abcdef01"

    def test_hash_from_binge_group(self) -> None:
        h = "0123456789abcdef0123456789abcdef01234567"
        stream = {"behaviorHints": {"bingeGroup": f"comet|{h}"}}
        assert extract_hash(stream) == h

    def test_no_hash(self) -> None:
        assert extract_hash({"behaviorHints": {"bingeGroup": "torrentio|1080p"}}) is None
        assert extract_hash({}) is None


class TestExtractSize:
    def test_video_size_formatted(self) -> None:
        stream = {"behaviorHints": {"videoSize": 2_254_857_830}}
        assert extract_size(stream) == "2.1 GB"

    def test_size_from_description(self) -> None:
        assert extract_size({"description": "Seeds 42 💾 4.5 GB"}) == "4.5 GB"

    def test_size_from_name(self) -> None:
        assert extract_size({"name": "Addon 700MB"}) == "700MB"

    def test_no_size(self) -> None:
        assert extract_size({"name": "Addon"}) is None

    @pytest.mark.parametrize(
        ("size", "expected"),
        [(500, "500 B"), (1536, "1.5 KB"), (5 * 1024**2, "5.0 MB")],
    )
    def test_format_size(self, size: int, expected: str) -> None:
        assert _format_size(size) == expected


class TestConstructMagnet:
    def test_magnet_escapes_title(self) -> None:
        magnet = construct_magnet("abc123", "Iron Man (2008)")
        assert magnet == "magnet:?xt=urn:btih:abc123&dn=Iron%20Man%20%282008%29"


# ---------------------------------------------------------------------------
# Whole-stream parsing
# ---------------------------------------------------------------------------


class TestParseStream:
    def test_full_stream(self, stremio_streams: list[dict[str, Any]]) -> None:
        candidate = parse_stream(stremio_streams[1], "torrentio", "Torrentio")

        assert candidate.url == "https://debrid.example/bluray.mkv"
        assert candidate.resolution is Resolution.FHD_1080P
        assert candidate.quality is SourceQuality.BLURAY
        assert candidate.is_cached is True
        assert candidate.size == "9.8 GB"
        assert candidate.magnet is not None
        assert candidate.magnet.startswith(
            "magnet:?xt=urn:btih:abcdef0123456789abcdef0123456789abcdef01&dn="
        )
        assert candidate.addon_id == "torrentio"
        assert candidate.addon_name == "Torrentio"

    def test_missing_url_is_none(self, stremio_streams: list[dict[str, Any]]) -> None:
        candidate = parse_stream(stremio_streams[2])
        assert candidate.url is None
        assert candidate.is_cached is False

    def test_filename_hint_preferred(self) -> None:
        stream = {
            "name": "Addon",
            "url": "https://x",
            "behaviorHints": {"filename": "Movie.2020.2160p.WEB-DL.mkv"},
            "title": "720p HDTV",
        }
        candidate = parse_stream(stream)
        assert candidate.resolution is Resolution.UHD_4K
        assert candidate.quality is SourceQuality.WEB_DL

    def test_untitled_stream(self) -> None:
        candidate = parse_stream({"url": "https://x"})
        assert candidate.title == "Unknown"
        assert candidate.description is None
        assert candidate.resolution is None
        assert candidate.quality is None

    def test_description_joins_title_and_description(self) -> None:
        candidate = parse_stream(
            {"name": "A", "title": "line one", "description": "line two"}
        )
        assert candidate.description == "line one\nline two"

    def test_parse_streams_keeps_order(
        self, stremio_streams: list[dict[str, Any]]
    ) -> None:
        candidates = parse_streams(stremio_streams, "torrentio", "Torrentio")
        assert [c.resolution for c in candidates] == [
            Resolution.UHD_4K,
            Resolution.FHD_1080P,
            Resolution.HD_720P,
        ]
        assert candidates[0].quality is SourceQuality.BLURAY_REMUX
        assert candidates[0].size == "61.2 GB"


class TestMalformedStreams:
    def test_non_string_fields_ignored(self) -> None:
        candidate = parse_stream(
            {
                "name": ["Addon"],
                "title": 42,
                "description": {"text": "x"},
                "url": 7,
            }
        )
        assert candidate.title == "Unknown"
        assert candidate.description is None
        assert candidate.url is None
        assert candidate.is_cached is False

    def test_non_string_title_keeps_description(self) -> None:
        candidate = parse_stream(
            {"name": "Addon", "title": None, "description": "1080p WEB-DL"}
        )
        assert candidate.description == "1080p WEB-DL"
        assert candidate.resolution is Resolution.FHD_1080P
