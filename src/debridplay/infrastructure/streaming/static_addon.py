"""Addon backed by an already-fetched stream list (e.g. a saved JSON response)."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from debridplay.domain.entities.streaming import (
    CandidateSource,
    EpisodeParams,
    MediaType,
)
from debridplay.infrastructure.streaming.stream_parser import parse_streams


class StaticStreamsAddon:
    """AddonSourcePort that serves the same parsed streams for every title."""

    def __init__(
        self,
        name: str,
        streams: Sequence[Mapping[str, Any]],
        *,
        addon_id: str | None = None,
    ) -> None:
        self.name = name
        self._candidates = parse_streams(streams, addon_id or name, name)

    @classmethod
    def from_response(
        cls, name: str, payload: Any, *, addon_id: str | None = None
    ) -> StaticStreamsAddon:
        """Build from a Stremio ``{"streams": [...]}`` payload or a bare list."""
        if isinstance(payload, Mapping):
            payload = payload.get("streams", [])
        if not isinstance(payload, list):
            raise ValueError(
                "Addon response must be a list or {'streams': [...]}, "
                f"got: {type(payload)!r}"
            )
        streams = [s for s in payload if isinstance(s, Mapping)]
        return cls(name, streams, addon_id=addon_id)

    async def fetch_candidates(
        self,
        media_id: str,
        media_type: MediaType,
        episode: EpisodeParams | None = None,
    ) -> list[CandidateSource]:
        return list(self._candidates)
