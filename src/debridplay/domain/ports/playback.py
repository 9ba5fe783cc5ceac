"""Port for the playback consumer (browser preview or external player)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from debridplay.domain.entities.streaming import CandidateSource


@runtime_checkable
class PlaybackConsumerPort(Protocol):
    """Receives the chosen source once playback should start."""

    def play(self, source: CandidateSource, *, title: str, file_name: str) -> None: ...
