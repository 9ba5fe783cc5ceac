"""Shared test fixtures for the debridplay test suite."""

from __future__ import annotations

import os
from typing import Any

import pytest

from debridplay.domain.entities.quality import Resolution, SourceQuality
from debridplay.domain.entities.streaming import (
    CandidateSource,
    EpisodeParams,
    PlaybackRequest,
)

# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clear_debridplay_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep DEBRIDPLAY_* variables from the host out of config tests."""
    for name in list(os.environ):
        if name.upper().startswith("DEBRIDPLAY_"):
            monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def cached_1080p_bluray() -> CandidateSource:
    return CandidateSource(
        url="https://debrid.example/1080p-bluray.mkv",
        resolution=Resolution.FHD_1080P,
        quality=SourceQuality.BLURAY,
        is_cached=True,
        title="Iron.Man.2008.1080p.BluRay.x264",
        size="9.8 GB",
        addon_name="torrentio",
    )


@pytest.fixture()
def uncached_2160p_remux() -> CandidateSource:
    return CandidateSource(
        url="https://debrid.example/2160p-remux.mkv",
        resolution=Resolution.UHD_4K,
        quality=SourceQuality.BLURAY_REMUX,
        is_cached=False,
        title="Iron.Man.2008.2160p.BluRay.REMUX",
        size="61.2 GB",
        addon_name="torrentio",
    )


@pytest.fixture()
def movie_request() -> PlaybackRequest:
    return PlaybackRequest(media_id="tt0371746", media_type="movie", title="Iron Man")


@pytest.fixture()
def episode_request() -> PlaybackRequest:
    return PlaybackRequest(
        media_id="tt0903747",
        media_type="show",
        title="Breaking Bad",
        episode=EpisodeParams(season=1, episode=5, title="Gray Matter"),
    )


@pytest.fixture()
def stremio_streams() -> list[dict[str, Any]]:
    """A realistic addon response body (``streams`` list)."""
    return [
        {
            "name": "Torrentio\n2160p",
            "title": "Iron.Man.2008.2160p.BluRay.REMUX.HEVC\n💾 61.2 GB",
            "url": "https://debrid.example/remux.mkv",
            "behaviorHints": {"bingeGroup": "torrentio|2160p"},
        },
        {
            "name": "[RD+] Torrentio\n1080p",
            "title": "Iron.Man.2008.1080p.BluRay.x264\n💾 9.8 GB",
            "url": "https://debrid.example/bluray.mkv",
            "infoHash": "ABCDEF0123456789ABCDEF0123456789ABCDEF01",
        },
        {
            "name": "[RD download] Torrentio\n720p",
            "title": "Iron.Man.2008.720p.WEB-DL\n💾 2.3 GB",
        },
    ]
