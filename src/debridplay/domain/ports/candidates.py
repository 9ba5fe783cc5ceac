"""Ports for candidate gathering (addon providers)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from debridplay.domain.entities.streaming import (
    CandidateSource,
    EpisodeParams,
    MediaType,
)


@runtime_checkable
class AddonSourcePort(Protocol):
    """A single addon provider that lists playable sources for a title."""

    name: str

    async def fetch_candidates(
        self,
        media_id: str,
        media_type: MediaType,
        episode: EpisodeParams | None = None,
    ) -> list[CandidateSource]: ...


@runtime_checkable
class CandidateGatheringPort(Protocol):
    """Produces the full candidate list for a title.

    Raises GatheringFailure when no list can be produced. An empty list
    is a normal outcome.
    """

    async def fetch_candidates(
        self,
        media_id: str,
        media_type: MediaType,
        episode: EpisodeParams | None = None,
    ) -> list[CandidateSource]: ...
