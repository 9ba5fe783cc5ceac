"""Quality range membership for candidate sources.

A candidate matches a range when both axes (resolution and source
quality) match. Bounds are resolved against the taxonomy on every call.

Rank semantics: lower index = better. ``max_*`` bounds are the best tier
admitted and map to the lower index limit; ``min_*`` bounds are the worst
tier admitted and map to the upper index limit.
"""

from __future__ import annotations

import math
from collections.abc import Callable

import structlog

from debridplay.domain.entities.quality import (
    ANY,
    UNKNOWN_RANK,
    resolution_rank,
    source_quality_rank,
)
from debridplay.domain.entities.streaming import CandidateSource, QualityRange

log = structlog.get_logger(__name__)

_RankFn = Callable[[object], int]


def _index_bounds(
    best_bound: str, worst_bound: str, rank_fn: _RankFn
) -> tuple[float, float]:
    """Resolve (min_index, max_index) for one axis.

    A bound that is "any" or does not resolve to a taxonomy label leaves
    that side unrestricted.
    """
    min_index: float = 0
    max_index: float = math.inf

    if best_bound != ANY:
        rank = rank_fn(best_bound)
        if rank != UNKNOWN_RANK:
            min_index = rank
        else:
            log.debug("quality_range_bound_unrecognized", bound=best_bound)

    if worst_bound != ANY:
        rank = rank_fn(worst_bound)
        if rank != UNKNOWN_RANK:
            max_index = rank
        else:
            log.debug("quality_range_bound_unrecognized", bound=worst_bound)

    return min_index, max_index


def _axis_matches(
    value: object, best_bound: str, worst_bound: str, rank_fn: _RankFn
) -> bool:
    if not value:
        return True
    rank = rank_fn(value)
    if rank == UNKNOWN_RANK:
        return True
    min_index, max_index = _index_bounds(best_bound, worst_bound, rank_fn)
    return min_index <= rank <= max_index


def matches_resolution_range(candidate: CandidateSource, range_: QualityRange) -> bool:
    """Resolution axis. Unknown resolution always passes."""
    return _axis_matches(
        candidate.resolution,
        range_.max_resolution,
        range_.min_resolution,
        resolution_rank,
    )


def matches_source_quality_range(
    candidate: CandidateSource, range_: QualityRange
) -> bool:
    """Source-quality axis. Unknown quality always passes."""
    return _axis_matches(
        candidate.quality,
        range_.max_source_quality,
        range_.min_source_quality,
        source_quality_rank,
    )


def matches(candidate: CandidateSource, range_: QualityRange) -> bool:
    """True when the candidate falls inside the range on both axes."""
    return matches_resolution_range(candidate, range_) and (
        matches_source_quality_range(candidate, range_)
    )


def is_inverted(range_: QualityRange) -> bool:
    """True when either axis admits nothing (best bound ranks worse than worst).

    Inverted ranges are evaluated literally and match no known tier on
    that axis.
    """
    res_min, res_max = _index_bounds(
        range_.max_resolution, range_.min_resolution, resolution_rank
    )
    sq_min, sq_max = _index_bounds(
        range_.max_source_quality, range_.min_source_quality, source_quality_rank
    )
    return res_min > res_max or sq_min > sq_max
