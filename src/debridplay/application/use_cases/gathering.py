"""Candidate gathering across all enabled addons.

Queries every addon in parallel (bounded concurrency, per-addon timeout)
and concatenates their candidates in addon order. That order is the
provider priority the selector preserves between equal-quality sources.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence

import structlog

from debridplay.domain.entities.streaming import (
    CandidateSource,
    EpisodeParams,
    GatheringFailure,
    MediaType,
    NoAddonsAvailable,
)
from debridplay.domain.ports.candidates import AddonSourcePort

log = structlog.get_logger(__name__)


class AddonFanoutGatherer:
    """CandidateGatheringPort over a priority-ordered list of addons.

    A failing or timed-out addon contributes no candidates. Only when
    every addon fails is the whole gathering reported as a failure.
    """

    def __init__(
        self,
        addons: Sequence[AddonSourcePort],
        *,
        max_concurrent: int = 5,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._addons = list(addons)
        self._max_concurrent = max_concurrent
        self._timeout = timeout_seconds

    @property
    def addon_names(self) -> list[str]:
        return [a.name for a in self._addons]

    async def fetch_candidates(
        self,
        media_id: str,
        media_type: MediaType,
        episode: EpisodeParams | None = None,
    ) -> list[CandidateSource]:
        if not self._addons:
            raise NoAddonsAvailable("No stream-capable addons are enabled")

        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def _fetch_one(
            addon: AddonSourcePort,
        ) -> tuple[list[CandidateSource], str | None]:
            async with semaphore:
                t0 = time.perf_counter_ns()
                try:
                    found = await asyncio.wait_for(
                        addon.fetch_candidates(media_id, media_type, episode),
                        timeout=self._timeout,
                    )
                except TimeoutError:
                    log.warning(
                        "addon_fetch_timeout",
                        addon=addon.name,
                        media_id=media_id,
                        timeout=self._timeout,
                    )
                    return [], f"{addon.name}: timed out after {self._timeout}s"
                except Exception as exc:  # noqa: BLE001
                    log.warning(
                        "addon_fetch_failed",
                        addon=addon.name,
                        media_id=media_id,
                        error=str(exc),
                        exc_info=True,
                    )
                    return [], f"{addon.name}: {exc}"

                log.debug(
                    "addon_fetch_complete",
                    addon=addon.name,
                    media_id=media_id,
                    candidate_count=len(found),
                    duration_ms=(time.perf_counter_ns() - t0) // 1_000_000,
                )
                return list(found), None

        results = await asyncio.gather(*(_fetch_one(a) for a in self._addons))

        errors = [err for _, err in results if err is not None]
        if len(errors) == len(self._addons):
            raise GatheringFailure("; ".join(errors))

        candidates: list[CandidateSource] = []
        for found, _ in results:
            candidates.extend(found)

        log.info(
            "candidates_gathered",
            media_id=media_id,
            media_type=media_type,
            addon_count=len(self._addons),
            failed_addons=len(errors),
            candidate_count=len(candidates),
        )
        return candidates
