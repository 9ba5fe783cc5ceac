"""Domain entities for streaming source resolution.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

from debridplay.domain.entities.quality import ANY, Resolution, SourceQuality

MediaType = Literal["movie", "show"]

# A range bound is a taxonomy label or "any" (unbounded on that side).
RangeBound = str


@dataclass(frozen=True)
class CandidateSource:
    """One playable option discovered for a media item.

    ``resolution``/``quality`` of None means the provider gave no usable
    metadata; such candidates are never excluded by a quality range.
    """

    url: str | None
    resolution: Resolution | None = None
    quality: SourceQuality | None = None
    is_cached: bool = False
    title: str = ""
    description: str | None = None
    size: str | None = None
    magnet: str | None = None
    addon_id: str = ""
    addon_name: str = ""


@dataclass(frozen=True)
class QualityRange:
    """User-configured inclusive quality range on two independent axes.

    ``max_*`` is the best tier admitted, ``min_*`` the worst tier admitted.
    Either side may be ``"any"``.
    """

    min_resolution: RangeBound = ANY
    max_resolution: RangeBound = ANY
    min_source_quality: RangeBound = ANY
    max_source_quality: RangeBound = ANY


UNRESTRICTED_RANGE = QualityRange()


@dataclass(frozen=True)
class StreamingSettings:
    """Snapshot of the user's streaming preferences for one resolution."""

    quality_range: QualityRange = UNRESTRICTED_RANGE
    auto_play: bool = True
    allow_uncached: bool = False


@dataclass(frozen=True)
class SelectionResult:
    """Outcome of one source selection.

    ``source`` is None iff ``has_matches`` is False. When set, it is the
    head of ``cached_matches`` if that is non-empty, else of
    ``uncached_matches``.
    """

    source: CandidateSource | None
    is_cached: bool
    has_matches: bool
    cached_matches: tuple[CandidateSource, ...] = ()
    uncached_matches: tuple[CandidateSource, ...] = ()

    def ranked(self) -> list[CandidateSource]:
        """All matches in fallback order: cached first, then uncached."""
        return [*self.cached_matches, *self.uncached_matches]


NO_MATCHES = SelectionResult(source=None, is_cached=False, has_matches=False)


@dataclass(frozen=True)
class EpisodeParams:
    """Season/episode coordinates of an episodic request."""

    season: int
    episode: int
    title: str | None = None


@dataclass(frozen=True)
class ResolutionRequestKey:
    """Identity of a resolution request.

    Created from ``movie:tt1234567`` or ``show:tt1234567:1:5``
    (season 1, episode 5). Season/episode are only kept for shows,
    and only as a complete pair.
    """

    media_id: str
    media_type: MediaType
    season: int | None = None
    episode: int | None = None

    def __post_init__(self) -> None:
        # Episode coordinates are kept only as a complete pair on shows.
        if self.media_type == "movie" or self.season is None or self.episode is None:
            object.__setattr__(self, "season", None)
            object.__setattr__(self, "episode", None)

    def __str__(self) -> str:
        if self.media_type == "show" and self.season is not None:
            return f"show:{self.media_id}:{self.season}:{self.episode}"
        return f"{self.media_type}:{self.media_id}"

    @classmethod
    def parse(cls, value: str) -> ResolutionRequestKey:
        """Parse the string form produced by ``str(key)``."""
        media_type, _, rest = value.partition(":")
        if media_type not in ("movie", "show") or not rest:
            raise ValueError(f"Invalid resolution request key: {value!r}")
        if media_type == "show":
            parts = rest.rsplit(":", 2)
            if len(parts) == 3 and parts[1].isdigit() and parts[2].isdigit():
                return cls(
                    media_id=parts[0],
                    media_type="show",
                    season=int(parts[1]),
                    episode=int(parts[2]),
                )
        return cls(media_id=rest, media_type=media_type)  # type: ignore[arg-type]


@dataclass(frozen=True)
class PlaybackRequest:
    """A user's request to play a movie or an episode."""

    media_id: str
    media_type: MediaType
    title: str = ""
    episode: EpisodeParams | None = None

    @property
    def key(self) -> ResolutionRequestKey:
        if self.media_type == "show" and self.episode is not None:
            return ResolutionRequestKey(
                media_id=self.media_id,
                media_type="show",
                season=self.episode.season,
                episode=self.episode.episode,
            )
        return ResolutionRequestKey(media_id=self.media_id, media_type=self.media_type)


class ResolutionState(str, Enum):
    """Lifecycle of one resolution attempt."""

    IDLE = "idle"
    RESOLVING = "resolving"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_settled(self) -> bool:
        return self in (ResolutionState.SUCCEEDED, ResolutionState.FAILED)


@dataclass(frozen=True)
class ResolutionAttempt:
    """One generation of a resolution for a request key."""

    key: ResolutionRequestKey
    generation: int
    state: ResolutionState = ResolutionState.RESOLVING
    result: SelectionResult | None = None
    error: str | None = None


class StreamingError(Exception):
    """Base error for streaming resolution."""


class GatheringFailure(StreamingError):
    """The candidate-gathering collaborator could not produce a list."""


class NoAddonsAvailable(GatheringFailure):
    """No stream-capable addon is configured."""
