"""Quality profiles and the config-backed streaming settings accessor."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from debridplay.domain.entities.quality import ANY, Resolution, SourceQuality
from debridplay.domain.entities.streaming import QualityRange, StreamingSettings
from debridplay.infrastructure.config.schema import StreamingConfig

log = structlog.get_logger(__name__)

CUSTOM_PROFILE_ID = "custom"
DEFAULT_PROFILE_ID = "balanced"


@dataclass(frozen=True)
class QualityProfile:
    """A named, preset quality range."""

    id: str
    name: str
    description: str
    range: QualityRange


QUALITY_PROFILES: tuple[QualityProfile, ...] = (
    QualityProfile(
        id="any",
        name="Any",
        description="No restrictions",
        range=QualityRange(),
    ),
    QualityProfile(
        id="high",
        name="High",
        description="1080p and up, no low-grade releases",
        range=QualityRange(
            min_resolution=Resolution.FHD_1080P.value,
            max_resolution=ANY,
            min_source_quality=SourceQuality.WEBRIP.value,
            max_source_quality=ANY,
        ),
    ),
    QualityProfile(
        id="balanced",
        name="Balanced",
        description="720p to 1080p, no cam or telesync",
        range=QualityRange(
            min_resolution=Resolution.HD_720P.value,
            max_resolution=Resolution.FHD_1080P.value,
            min_source_quality=SourceQuality.HDRIP.value,
            max_source_quality=ANY,
        ),
    ),
    QualityProfile(
        id="efficient",
        name="Efficient",
        description="Up to 720p for slow connections",
        range=QualityRange(
            min_resolution=ANY,
            max_resolution=Resolution.HD_720P.value,
            min_source_quality=ANY,
            max_source_quality=ANY,
        ),
    ),
)

_PROFILES_BY_ID: dict[str, QualityProfile] = {p.id: p for p in QUALITY_PROFILES}


def get_profile(profile_id: str) -> QualityProfile | None:
    return _PROFILES_BY_ID.get(profile_id)


def get_active_range(config: StreamingConfig) -> QualityRange:
    """Resolve the range in effect: the custom range or the selected profile's."""
    if config.profile_id == CUSTOM_PROFILE_ID:
        return config.custom_range.to_range()

    profile = get_profile(config.profile_id)
    if profile is None:
        log.warning(
            "quality_profile_unknown",
            profile_id=config.profile_id,
            fallback=DEFAULT_PROFILE_ID,
        )
        profile = _PROFILES_BY_ID[DEFAULT_PROFILE_ID]
    return profile.range


class ConfigStreamingSettings:
    """StreamingSettingsPort backed by the loaded StreamingConfig.

    The config object is swapped, never mutated, so a snapshot taken by
    an in-flight resolution stays consistent.
    """

    def __init__(self, config: StreamingConfig) -> None:
        self._config = config

    def replace_config(self, config: StreamingConfig) -> None:
        self._config = config

    def current_quality_range(self) -> QualityRange:
        return get_active_range(self._config)

    def current_settings(self) -> StreamingSettings:
        config = self._config
        return StreamingSettings(
            quality_range=get_active_range(config),
            auto_play=config.auto_play,
            allow_uncached=config.allow_uncached,
        )
