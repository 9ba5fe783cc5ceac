"""Tests for AddonFanoutGatherer."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from debridplay.application.use_cases.gathering import AddonFanoutGatherer
from debridplay.domain.entities.streaming import (
    CandidateSource,
    EpisodeParams,
    GatheringFailure,
    NoAddonsAvailable,
)
from debridplay.domain.ports.candidates import CandidateGatheringPort

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _candidate(name: str) -> CandidateSource:
    return CandidateSource(url=f"https://debrid.example/{name}", title=name)


def _make_addon(
    name: str,
    *,
    result: list[CandidateSource] | None = None,
    error: Exception | None = None,
) -> MagicMock:
    addon = MagicMock()
    addon.name = name
    if error is not None:
        addon.fetch_candidates = AsyncMock(side_effect=error)
    else:
        addon.fetch_candidates = AsyncMock(return_value=result or [])
    return addon


class _SlowAddon:
    def __init__(self, name: str, delay: float, result: list[CandidateSource]) -> None:
        self.name = name
        self._delay = delay
        self._result = result

    async def fetch_candidates(self, media_id, media_type, episode=None):  # noqa: ANN001
        await asyncio.sleep(self._delay)
        return self._result


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestAddonFanoutGatherer:
    def test_satisfies_port(self) -> None:
        assert isinstance(AddonFanoutGatherer([]), CandidateGatheringPort)

    def test_addon_names(self) -> None:
        gatherer = AddonFanoutGatherer([_make_addon("a"), _make_addon("b")])
        assert gatherer.addon_names == ["a", "b"]

    @pytest.mark.asyncio
    async def test_no_addons_raises(self) -> None:
        with pytest.raises(NoAddonsAvailable):
            await AddonFanoutGatherer([]).fetch_candidates("tt001", "movie")

    @pytest.mark.asyncio
    async def test_concatenates_in_addon_order(self) -> None:
        a1, a2, b1 = _candidate("a1"), _candidate("a2"), _candidate("b1")
        # First addon finishes last; order must still follow the addon list.
        slow = _SlowAddon("slow", 0.05, [a1, a2])
        fast = _SlowAddon("fast", 0.0, [b1])

        result = await AddonFanoutGatherer([slow, fast]).fetch_candidates(
            "tt001", "movie"
        )

        assert result == [a1, a2, b1]

    @pytest.mark.asyncio
    async def test_forwards_request_params(self) -> None:
        addon = _make_addon("a")
        episode = EpisodeParams(season=1, episode=5)

        await AddonFanoutGatherer([addon]).fetch_candidates("tt002", "show", episode)

        addon.fetch_candidates.assert_awaited_once_with("tt002", "show", episode)

    @pytest.mark.asyncio
    async def test_partial_failure_tolerated(self) -> None:
        ok = _candidate("ok")
        gatherer = AddonFanoutGatherer(
            [
                _make_addon("broken", error=RuntimeError("boom")),
                _make_addon("good", result=[ok]),
            ]
        )

        assert await gatherer.fetch_candidates("tt001", "movie") == [ok]

    @pytest.mark.asyncio
    async def test_all_failed_raises(self) -> None:
        gatherer = AddonFanoutGatherer(
            [
                _make_addon("a", error=RuntimeError("boom")),
                _make_addon("b", error=ConnectionError("refused")),
            ]
        )

        with pytest.raises(GatheringFailure, match="a: boom; b: refused"):
            await gatherer.fetch_candidates("tt001", "movie")

    @pytest.mark.asyncio
    async def test_empty_results_are_not_failure(self) -> None:
        gatherer = AddonFanoutGatherer([_make_addon("a"), _make_addon("b")])
        assert await gatherer.fetch_candidates("tt001", "movie") == []

    @pytest.mark.asyncio
    async def test_timeout_counts_as_failure(self) -> None:
        ok = _candidate("ok")
        gatherer = AddonFanoutGatherer(
            [_SlowAddon("slow", 1.0, [_candidate("late")]), _make_addon("ok", result=[ok])],
            timeout_seconds=0.01,
        )

        assert await gatherer.fetch_candidates("tt001", "movie") == [ok]

    @pytest.mark.asyncio
    async def test_all_timed_out_raises(self) -> None:
        gatherer = AddonFanoutGatherer(
            [_SlowAddon("slow", 1.0, [])], timeout_seconds=0.01
        )
        with pytest.raises(GatheringFailure, match="slow: timed out"):
            await gatherer.fetch_candidates("tt001", "movie")

    @pytest.mark.asyncio
    async def test_concurrency_bounded(self) -> None:
        in_flight = 0
        peak = 0

        class _Probe:
            def __init__(self, name: str) -> None:
                self.name = name

            async def fetch_candidates(self, media_id, media_type, episode=None):  # noqa: ANN001
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1
                return []

        gatherer = AddonFanoutGatherer(
            [_Probe(str(i)) for i in range(6)], max_concurrent=2
        )
        await gatherer.fetch_candidates("tt001", "movie")

        assert peak == 2
