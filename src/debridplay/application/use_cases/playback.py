"""Playback initiation use case.

play request -> single-flight check -> gather candidates
-> select best source -> settle -> hand off to the player.
"""

from __future__ import annotations

import itertools
from collections import OrderedDict
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Literal

import structlog

from debridplay.domain.entities.streaming import (
    CandidateSource,
    PlaybackRequest,
    QualityRange,
    ResolutionAttempt,
    ResolutionRequestKey,
    ResolutionState,
    SelectionResult,
)
from debridplay.domain.ports.candidates import CandidateGatheringPort
from debridplay.domain.ports.playback import PlaybackConsumerPort
from debridplay.domain.ports.settings import StreamingSettingsPort

log = structlog.get_logger(__name__)

DuplicatePolicy = Literal["ignore", "supersede"]

_KeyLike = ResolutionRequestKey | str

# Injected pure selector: (candidates, quality_range) -> SelectionResult.
_SelectFn = Callable[[Iterable[CandidateSource], QualityRange], SelectionResult]


def _as_key(key: _KeyLike) -> ResolutionRequestKey:
    if isinstance(key, ResolutionRequestKey):
        return key
    return ResolutionRequestKey.parse(key)


class ResolutionRequestTracker:
    """Per-key state machine: Idle -> Resolving -> Settled(Succeeded|Failed).

    Each accepted start gets a new generation number. Completions carrying
    an older generation are stale and dropped. Keys are fully independent;
    there is no global single-flight.

    Only in-flight attempts are held per key. Settled attempts are kept
    for lookup in a bounded most-recent window of ``max_settled`` keys.

    Mutations are synchronous, so within one event loop they never
    interleave.
    """

    def __init__(
        self, *, policy: DuplicatePolicy = "ignore", max_settled: int = 256
    ) -> None:
        self._policy = policy
        self._max_settled = max_settled
        self._resolving: dict[ResolutionRequestKey, ResolutionAttempt] = {}
        self._settled: OrderedDict[ResolutionRequestKey, ResolutionAttempt] = (
            OrderedDict()
        )
        # Global across keys; a generation number is never reused.
        self._generations = itertools.count(1)

    @property
    def policy(self) -> DuplicatePolicy:
        return self._policy

    def begin(self, key: _KeyLike) -> ResolutionAttempt | None:
        """Start resolving ``key``.

        Returns the new attempt, or None when the key is already
        resolving and the policy is "ignore".
        """
        key = _as_key(key)
        current = self._resolving.get(key)
        if current is not None:
            if self._policy == "ignore":
                log.debug(
                    "resolution_duplicate_ignored",
                    key=str(key),
                    generation=current.generation,
                )
                return None
            log.info(
                "resolution_superseded",
                key=str(key),
                stale_generation=current.generation,
            )

        self._settled.pop(key, None)
        attempt = ResolutionAttempt(key=key, generation=next(self._generations))
        self._resolving[key] = attempt
        return attempt

    def is_current(self, attempt: ResolutionAttempt) -> bool:
        """True while ``attempt`` is the in-flight generation for its key."""
        current = self._resolving.get(attempt.key)
        return current is not None and current.generation == attempt.generation

    def settle_success(
        self, attempt: ResolutionAttempt, result: SelectionResult
    ) -> ResolutionAttempt | None:
        """Record a selection result. Returns None for stale attempts."""
        return self._settle(
            attempt, state=ResolutionState.SUCCEEDED, result=result, error=None
        )

    def settle_failure(
        self, attempt: ResolutionAttempt, error: str
    ) -> ResolutionAttempt | None:
        """Record a failed resolution. Returns None for stale attempts."""
        return self._settle(
            attempt, state=ResolutionState.FAILED, result=None, error=error
        )

    def _settle(
        self,
        attempt: ResolutionAttempt,
        *,
        state: ResolutionState,
        result: SelectionResult | None,
        error: str | None,
    ) -> ResolutionAttempt | None:
        if not self.is_current(attempt):
            log.debug(
                "resolution_stale_discarded",
                key=str(attempt.key),
                generation=attempt.generation,
            )
            return None
        current = self._resolving.pop(attempt.key)
        settled = replace(current, state=state, result=result, error=error)
        self._settled[attempt.key] = settled
        while len(self._settled) > self._max_settled:
            self._settled.popitem(last=False)
        return settled

    def is_loading(self, key: _KeyLike) -> bool:
        return _as_key(key) in self._resolving

    def state(self, key: _KeyLike) -> ResolutionState:
        attempt = self.get(key)
        return attempt.state if attempt is not None else ResolutionState.IDLE

    def get(self, key: _KeyLike) -> ResolutionAttempt | None:
        key = _as_key(key)
        return self._resolving.get(key) or self._settled.get(key)

    def cancel(self, key: _KeyLike) -> bool:
        """Forget ``key``; an in-flight attempt for it becomes stale."""
        key = _as_key(key)
        removed = self._resolving.pop(key, None)
        settled = self._settled.pop(key, None)
        if removed is not None:
            log.debug(
                "resolution_cancelled",
                key=str(key),
                generation=removed.generation,
            )
        return removed is not None or settled is not None

    def active_keys(self) -> list[ResolutionRequestKey]:
        return list(self._resolving)

    def tracked_count(self) -> int:
        """Number of keys currently held (in-flight plus settled window)."""
        return len(self._resolving) + len(self._settled)


# ---------------------------------------------------------------------------
# Hand-off to the player
# ---------------------------------------------------------------------------


class HandoffAction(str, Enum):
    """What the UI should do with a successful selection."""

    AUTO_PLAY = "auto_play"
    CONFIRM = "confirm"
    CONFIRM_UNCACHED = "confirm_uncached"


def decide_handoff(
    result: SelectionResult, *, auto_play: bool, allow_uncached: bool
) -> HandoffAction:
    eligible = result.is_cached or allow_uncached
    if auto_play and eligible:
        return HandoffAction.AUTO_PLAY
    if eligible:
        return HandoffAction.CONFIRM
    return HandoffAction.CONFIRM_UNCACHED


def format_title(request: PlaybackRequest) -> str:
    """Display title, e.g. ``Show S01E05 - Episode name`` for episodes."""
    title = request.title or "Untitled"
    if request.media_type == "show" and request.episode is not None:
        ep = request.episode
        title = f"{title} S{ep.season:02d}E{ep.episode:02d}"
        if ep.title:
            title = f"{title} - {ep.title}"
    return title


def build_file_name(title: str, source: CandidateSource) -> str:
    """File name with source metadata, e.g. ``Movie [1080p BluRay 2.1 GB]``."""
    meta = [
        source.resolution.value if source.resolution else None,
        source.quality.value if source.quality else None,
        source.size,
    ]
    label = " ".join(m for m in meta if m)
    return f"{title} [{label}]" if label else title


@dataclass(frozen=True)
class PlaybackOutcome:
    """Settled attempt plus the hand-off decision for a successful pick."""

    attempt: ResolutionAttempt
    title: str
    action: HandoffAction | None = None

    @property
    def result(self) -> SelectionResult | None:
        return self.attempt.result

    @property
    def failed(self) -> bool:
        return self.attempt.state is ResolutionState.FAILED


class PlaybackUseCase:
    """Resolve a play request into a single source and hand it off.

    Flow:
        1. Reject duplicates for a key that is already resolving.
        2. Snapshot streaming settings (quality range, auto-play).
        3. Gather candidates from the addons.
        4. Select the best source.
        5. Settle the attempt (stale completions are dropped).
        6. Auto-play, or leave the pick for the caller to confirm.
    """

    def __init__(
        self,
        *,
        gatherer: CandidateGatheringPort,
        settings: StreamingSettingsPort,
        select_fn: _SelectFn,
        tracker: ResolutionRequestTracker | None = None,
        consumer: PlaybackConsumerPort | None = None,
    ) -> None:
        self._gatherer = gatherer
        self._settings = settings
        self._select_fn = select_fn
        self._tracker = tracker or ResolutionRequestTracker()
        self._consumer = consumer

    @property
    def tracker(self) -> ResolutionRequestTracker:
        return self._tracker

    def resolve(
        self,
        key: _KeyLike,
        candidates: Iterable[CandidateSource],
        quality_range: QualityRange,
    ) -> SelectionResult:
        """Select for an already-gathered candidate list (no tracking)."""
        result = self._select_fn(candidates, quality_range)
        log.debug(
            "resolution_selected",
            key=str(_as_key(key)),
            has_matches=result.has_matches,
            is_cached=result.is_cached,
        )
        return result

    def is_loading(self, key: _KeyLike) -> bool:
        return self._tracker.is_loading(key)

    def cancel(self, key: _KeyLike) -> bool:
        return self._tracker.cancel(key)

    async def initiate_playback(
        self, request: PlaybackRequest
    ) -> PlaybackOutcome | None:
        """Run one resolution for ``request``.

        Returns None when the request was a suppressed duplicate or its
        result went stale (cancelled or superseded) before settling.
        Errors before settling mark the attempt FAILED and are not retried.
        Cancellation forgets the attempt, so the key is free to start again.
        """
        key = request.key
        attempt = self._tracker.begin(key)
        if attempt is None:
            return None

        title = request.title
        try:
            settings = self._settings.current_settings()
            title = format_title(request)
            log.info(
                "resolution_started",
                key=str(key),
                generation=attempt.generation,
                title=title,
            )
            candidates = await self._gatherer.fetch_candidates(
                request.media_id, request.media_type, request.episode
            )
            result = self.resolve(key, candidates, settings.quality_range)
        except Exception as exc:  # noqa: BLE001
            return self._fail(attempt, title, exc)
        except BaseException:
            if self._tracker.is_current(attempt):
                self._tracker.cancel(key)
            log.info(
                "resolution_interrupted",
                key=str(key),
                generation=attempt.generation,
            )
            raise

        settled = self._tracker.settle_success(attempt, result)
        if settled is None:
            return None

        if not result.has_matches:
            log.info(
                "resolution_no_matches",
                key=str(key),
                candidate_count=len(candidates),
            )
            return PlaybackOutcome(attempt=settled, title=title)

        action = decide_handoff(
            result,
            auto_play=settings.auto_play,
            allow_uncached=settings.allow_uncached,
        )
        log.info(
            "resolution_settled",
            key=str(key),
            generation=attempt.generation,
            is_cached=result.is_cached,
            cached_count=len(result.cached_matches),
            uncached_count=len(result.uncached_matches),
            action=action.value,
        )

        if action is HandoffAction.AUTO_PLAY and result.source is not None:
            self.play_source(result.source, request)

        return PlaybackOutcome(attempt=settled, title=title, action=action)

    def _fail(
        self, attempt: ResolutionAttempt, title: str, exc: Exception
    ) -> PlaybackOutcome | None:
        error = str(exc) or type(exc).__name__
        settled = self._tracker.settle_failure(attempt, error)
        if settled is None:
            return None
        log.warning(
            "resolution_failed",
            key=str(attempt.key),
            generation=attempt.generation,
            error=error,
        )
        return PlaybackOutcome(attempt=settled, title=title)

    def play_source(self, source: CandidateSource, request: PlaybackRequest) -> bool:
        """Hand ``source`` to the playback consumer. URL-less sources are skipped."""
        if not source.url or self._consumer is None:
            return False
        title = format_title(request)
        self._consumer.play(
            source, title=title, file_name=build_file_name(title, source)
        )
        return True
