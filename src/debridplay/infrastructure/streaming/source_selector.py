"""Best-source selection for playback.

Filters candidates by quality range, splits them into cached and
uncached, and orders each group by resolution then source quality.
A cached match always wins over an uncached one, whatever their tiers.

Pure and deterministic: the quality range is passed in explicitly.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from debridplay.domain.entities.quality import resolution_rank, source_quality_rank
from debridplay.domain.entities.streaming import (
    NO_MATCHES,
    CandidateSource,
    QualityRange,
    SelectionResult,
)
from debridplay.infrastructure.streaming.range_predicate import is_inverted, matches

log = structlog.get_logger(__name__)


def priority_key(candidate: CandidateSource) -> tuple[int, int]:
    """Composite sort key: (resolution rank, source-quality rank), lower first."""
    return (
        resolution_rank(candidate.resolution),
        source_quality_rank(candidate.quality),
    )


def select_best_source(
    candidates: Iterable[CandidateSource],
    quality_range: QualityRange,
) -> SelectionResult:
    """Pick the best playable candidate within ``quality_range``.

    Candidates with equal priority keep their input order (provider
    order), since ``sorted`` is stable.
    """
    if is_inverted(quality_range):
        log.warning(
            "quality_range_inverted",
            min_resolution=quality_range.min_resolution,
            max_resolution=quality_range.max_resolution,
            min_source_quality=quality_range.min_source_quality,
            max_source_quality=quality_range.max_source_quality,
        )

    matching = [c for c in candidates if c.url and matches(c, quality_range)]

    cached = tuple(sorted((c for c in matching if c.is_cached), key=priority_key))
    uncached = tuple(
        sorted((c for c in matching if not c.is_cached), key=priority_key)
    )

    if cached:
        return SelectionResult(
            source=cached[0],
            is_cached=True,
            has_matches=True,
            cached_matches=cached,
            uncached_matches=uncached,
        )

    if uncached:
        return SelectionResult(
            source=uncached[0],
            is_cached=False,
            has_matches=True,
            cached_matches=cached,
            uncached_matches=uncached,
        )

    return NO_MATCHES
