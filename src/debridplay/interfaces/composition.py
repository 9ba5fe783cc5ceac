"""Composition root: wires the playback use case from AppConfig."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from debridplay.application.use_cases.gathering import AddonFanoutGatherer
from debridplay.application.use_cases.playback import (
    PlaybackUseCase,
    ResolutionRequestTracker,
)
from debridplay.domain.ports.candidates import AddonSourcePort
from debridplay.domain.ports.playback import PlaybackConsumerPort
from debridplay.infrastructure.config.schema import AppConfig
from debridplay.infrastructure.streaming.profiles import ConfigStreamingSettings
from debridplay.infrastructure.streaming.source_selector import select_best_source

log = structlog.get_logger(__name__)


def build_playback_use_case(
    config: AppConfig,
    addons: Sequence[AddonSourcePort],
    *,
    consumer: PlaybackConsumerPort | None = None,
) -> PlaybackUseCase:
    """Build a PlaybackUseCase over ``addons`` (priority order)."""
    streaming = config.streaming
    gatherer = AddonFanoutGatherer(
        addons,
        max_concurrent=streaming.max_concurrent_addons,
        timeout_seconds=streaming.addon_timeout_seconds,
    )
    use_case = PlaybackUseCase(
        gatherer=gatherer,
        settings=ConfigStreamingSettings(streaming),
        select_fn=select_best_source,
        tracker=ResolutionRequestTracker(policy=streaming.duplicate_policy),
        consumer=consumer,
    )
    log.debug(
        "playback_use_case_built",
        addons=gatherer.addon_names,
        profile_id=streaming.profile_id,
        duplicate_policy=streaming.duplicate_policy,
    )
    return use_case
