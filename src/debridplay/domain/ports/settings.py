"""Port for reading the user's streaming settings."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from debridplay.domain.entities.streaming import QualityRange, StreamingSettings


@runtime_checkable
class StreamingSettingsPort(Protocol):
    """Read-only accessor; each call returns an immutable snapshot."""

    def current_quality_range(self) -> QualityRange: ...

    def current_settings(self) -> StreamingSettings: ...
