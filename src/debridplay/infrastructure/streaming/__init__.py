"""Source selection, quality profiles and addon stream parsing."""

from __future__ import annotations

from .profiles import QUALITY_PROFILES, ConfigStreamingSettings, get_active_range
from .range_predicate import matches
from .source_selector import priority_key, select_best_source
from .static_addon import StaticStreamsAddon
from .stream_parser import parse_stream, parse_streams

__all__ = [
    "QUALITY_PROFILES",
    "ConfigStreamingSettings",
    "StaticStreamsAddon",
    "get_active_range",
    "matches",
    "parse_stream",
    "parse_streams",
    "priority_key",
    "select_best_source",
]
