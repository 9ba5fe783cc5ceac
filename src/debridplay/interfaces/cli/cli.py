from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog

from debridplay.application.use_cases.playback import PlaybackOutcome
from debridplay.domain.entities.streaming import (
    CandidateSource,
    EpisodeParams,
    PlaybackRequest,
)
from debridplay.infrastructure.config import load_config
from debridplay.infrastructure.logging.setup import configure_logging
from debridplay.infrastructure.streaming.static_addon import StaticStreamsAddon
from debridplay.interfaces.composition import build_playback_use_case

log = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_NO_MATCHES = 1
EXIT_FAILED = 2


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="debridplay",
        description="Pick the best playable source from saved addon stream lists.",
    )

    parser.add_argument(
        "streams",
        nargs="+",
        help="Addon stream JSON files, highest-priority addon first.",
    )

    # Media identity
    parser.add_argument("--media-id", default="local", help="Media identifier.")
    parser.add_argument(
        "--type",
        dest="media_type",
        default="movie",
        choices=["movie", "show"],
        help="Media type.",
    )
    parser.add_argument("--title", default="", help="Display title.")
    parser.add_argument("--season", type=int, default=None)
    parser.add_argument("--episode", type=int, default=None)

    # Config wiring flags (no business logic)
    parser.add_argument("--config", default=None, help="Path to YAML config file.")
    parser.add_argument("--dotenv", default=None, help="Path to .env file.")
    parser.add_argument(
        "--profile",
        default=None,
        help="Override quality profile id (or 'custom').",
    )
    parser.add_argument(
        "--allow-uncached",
        action="store_true",
        default=None,
        help="Play uncached sources without confirmation.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )
    parser.add_argument(
        "--all",
        dest="show_all",
        action="store_true",
        help="Include every ranked match in the output.",
    )

    args = parser.parse_args(argv)
    if args.media_type == "show" and (args.season is None or args.episode is None):
        parser.error("--season and --episode are required for --type show")
    return args


def _load_addons(paths: Iterable[str]) -> list[StaticStreamsAddon]:
    addons: list[StaticStreamsAddon] = []
    for raw in paths:
        path = Path(raw)
        payload = json.loads(path.read_text(encoding="utf-8"))
        addons.append(StaticStreamsAddon.from_response(path.stem, payload))
    return addons


def _source_dict(source: CandidateSource) -> dict[str, Any]:
    return {
        "title": source.title,
        "url": source.url,
        "resolution": source.resolution.value if source.resolution else None,
        "quality": source.quality.value if source.quality else None,
        "size": source.size,
        "is_cached": source.is_cached,
        "addon": source.addon_name,
    }


def _outcome_dict(outcome: PlaybackOutcome, *, show_all: bool) -> dict[str, Any]:
    result = outcome.result
    out: dict[str, Any] = {
        "key": str(outcome.attempt.key),
        "title": outcome.title,
        "state": outcome.attempt.state.value,
        "error": outcome.attempt.error,
        "action": outcome.action.value if outcome.action else None,
    }
    if result is not None:
        out.update(
            {
                "has_matches": result.has_matches,
                "is_cached": result.is_cached,
                "source": _source_dict(result.source) if result.source else None,
                "cached_count": len(result.cached_matches),
                "uncached_count": len(result.uncached_matches),
            }
        )
        if show_all:
            out["matches"] = [_source_dict(s) for s in result.ranked()]
    return out


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Loads config once, then resolves a single play request over the given
    stream files and prints the outcome as JSON.
    """
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    cli_overrides: dict[str, Any] = {}
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format
    if args.profile:
        cli_overrides["streaming_profile_id"] = args.profile
    if args.allow_uncached:
        cli_overrides["streaming_allow_uncached"] = True

    config = load_config(
        config_path=Path(args.config) if args.config else None,
        dotenv_path=Path(args.dotenv) if args.dotenv else None,
        cli_overrides=cli_overrides,
    )
    configure_logging(config)

    use_case = build_playback_use_case(config, _load_addons(args.streams))

    episode = (
        EpisodeParams(season=args.season, episode=args.episode)
        if args.media_type == "show"
        else None
    )
    request = PlaybackRequest(
        media_id=args.media_id,
        media_type=args.media_type,
        title=args.title,
        episode=episode,
    )

    outcome = asyncio.run(use_case.initiate_playback(request))
    if outcome is None:
        log.error("playback_not_started", key=str(request.key))
        return EXIT_FAILED

    print(json.dumps(_outcome_dict(outcome, show_all=args.show_all), indent=2))

    if outcome.failed:
        return EXIT_FAILED
    if outcome.result is None or not outcome.result.has_matches:
        return EXIT_NO_MATCHES
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(start())
