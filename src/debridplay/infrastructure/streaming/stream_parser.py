"""Addon stream parser using guessit for resolution and source quality.

Converts Stremio-style addon stream objects (plain dicts) into
CandidateSources. Pure transformation logic, no I/O.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import quote

from guessit import guessit

from debridplay.domain.entities.quality import (
    Resolution,
    SourceQuality,
    parse_resolution_label,
)
from debridplay.domain.entities.streaming import CandidateSource

_HASH_RE = re.compile(r"[a-f0-9]{40}")
_FILE_SIZE_RE = re.compile(r"\b\d+(?:\.\d+)?\s*(?:[KMGT]i?)?B\b", re.IGNORECASE)

# --- Resolution mappings ---

_RESOLUTION_TOKEN_RE = re.compile(
    r"(?i)(?<![a-z0-9])(2160p|1440p|1080[pi]|720p|576p|480p|360p|4k|uhd)(?![a-z0-9])"
)

# --- Source quality mappings ---

# Ordered: first match wins. REMUX must precede BluRay, WEB-DL/WEBRip
# must precede the bare tiers they contain.
_SOURCE_QUALITY_TOKENS: tuple[tuple[re.Pattern[str], SourceQuality], ...] = tuple(
    (re.compile(rf"(?i)(?<![a-z0-9]){pattern}(?![a-z0-9])"), quality)
    for pattern, quality in (
        (r"(?:bd|blu-?ray)?[ ._-]?remux", SourceQuality.BLURAY_REMUX),
        (r"(?:blu-?ray|bdrip|brrip|bd25|bd50)", SourceQuality.BLURAY),
        (r"web[ ._-]?dl", SourceQuality.WEB_DL),
        (r"web[ ._-]?rip", SourceQuality.WEBRIP),
        (r"hdtv", SourceQuality.HDTV),
        (r"dvd[ ._-]?rip", SourceQuality.DVDRIP),
        (r"hd[ ._-]?rip", SourceQuality.HDRIP),
        (r"(?:dvd)?scr(?:eener)?", SourceQuality.SCR),
        (r"(?:hd)?(?:tc|telecine)", SourceQuality.TC),
        (r"(?:hd)?(?:ts|telesync)", SourceQuality.TS),
        (r"(?:hd)?cam(?:rip)?", SourceQuality.CAM),
    )
)

_GUESSIT_SOURCE_TO_QUALITY: dict[str, SourceQuality] = {
    "Blu-ray": SourceQuality.BLURAY,
    "Ultra HD Blu-ray": SourceQuality.BLURAY,
    "Web": SourceQuality.WEB_DL,
    "HDTV": SourceQuality.HDTV,
    "TV": SourceQuality.HDTV,
    "Digital TV": SourceQuality.HDTV,
    "DVD": SourceQuality.DVDRIP,
    "Telecine": SourceQuality.TC,
    "HD Telecine": SourceQuality.TC,
    "Telesync": SourceQuality.TS,
    "HD Telesync": SourceQuality.TS,
    "Camera": SourceQuality.CAM,
    "HD Camera": SourceQuality.CAM,
}

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _hints(stream: Mapping[str, Any]) -> Mapping[str, Any]:
    hints = stream.get("behaviorHints")
    return hints if isinstance(hints, Mapping) else {}


def _format_size(size_bytes: float) -> str:
    """Format a byte count like '2.1 GB'."""
    value = float(size_bytes)
    unit = _SIZE_UNITS[0]
    for unit in _SIZE_UNITS:
        if value < 1024 or unit == _SIZE_UNITS[-1]:
            break
        value /= 1024
    if unit == "B":
        return f"{int(value)} B"
    return f"{value:.1f} {unit}"


def _str_field(stream: Mapping[str, Any], field: str) -> str:
    """String value of ``field``; non-string values count as missing."""
    value = stream.get(field)
    return value if isinstance(value, str) else ""


def _first_line(text: str) -> str:
    lines = text.strip().splitlines()
    return lines[0] if lines else ""


def _release_texts(stream: Mapping[str, Any]) -> list[str]:
    """Candidate release strings, most specific first."""
    texts: list[str] = []
    filename = _hints(stream).get("filename")
    if isinstance(filename, str) and filename.strip():
        texts.append(filename.strip())
    for field in ("title", "description", "name"):
        value = stream.get(field)
        if isinstance(value, str) and value.strip():
            texts.append(value.strip())
    return texts


# --- Public API ---


def parse_resolution(text: str | None) -> Resolution | None:
    """Determine resolution from a release string.

    Priority: 1) guessit screen_size, 2) explicit resolution token.
    """
    text = (text or "").strip()
    if not text:
        return None

    guess = guessit(_first_line(text))
    screen_size = guess.get("screen_size")
    if isinstance(screen_size, str):
        resolution = parse_resolution_label(screen_size)
        if resolution is not None:
            return resolution

    match = _RESOLUTION_TOKEN_RE.search(text)
    if match:
        return parse_resolution_label(match.group(1))
    return None


def parse_source_quality(text: str | None) -> SourceQuality | None:
    """Determine source quality from a release string.

    Priority: 1) explicit release-tier token, 2) guessit source/other.
    """
    text = (text or "").strip()
    if not text:
        return None

    for pattern, quality in _SOURCE_QUALITY_TOKENS:
        if pattern.search(text):
            return quality

    guess = guessit(_first_line(text))
    other = {str(o) for o in _as_list(guess.get("other"))}
    for source in _as_list(guess.get("source")):
        quality = _GUESSIT_SOURCE_TO_QUALITY.get(str(source))
        if quality is None:
            continue
        if quality is SourceQuality.BLURAY and "Remux" in other:
            return SourceQuality.BLURAY_REMUX
        if quality is SourceQuality.WEB_DL and "Rip" in other:
            return SourceQuality.WEBRIP
        return quality
    if "Screener" in other:
        return SourceQuality.SCR
    return None


def detect_cached(stream: Mapping[str, Any]) -> bool:
    """Cached when the name says "instant" or "+", or name/description carry ✅/⚡."""
    name = _str_field(stream, "name")
    description = _str_field(stream, "description")
    combined = f"{name} {description}"

    name_check = "instant" in name.lower() or "+" in name
    emoji_check = "✅" in combined or "⚡" in combined
    return name_check or emoji_check


def extract_hash(stream: Mapping[str, Any]) -> str | None:
    """Info hash from ``infoHash``, else a 40-hex match in ``bingeGroup``."""
    info_hash = stream.get("infoHash")
    if info_hash:
        return str(info_hash).lower()

    binge_group = _hints(stream).get("bingeGroup")
    if binge_group:
        match = _HASH_RE.search(str(binge_group).lower())
        if match:
            return match.group(0)
    return None


def extract_size(stream: Mapping[str, Any]) -> str | None:
    """Size from ``videoSize`` (bytes), else the first size token in the text."""
    video_size = _hints(stream).get("videoSize")
    if isinstance(video_size, (int, float)) and video_size > 0:
        return _format_size(video_size)

    for field in ("description", "title", "name"):
        value = stream.get(field)
        if isinstance(value, str):
            match = _FILE_SIZE_RE.search(value)
            if match:
                return match.group(0)
    return None


def construct_magnet(info_hash: str, title: str) -> str:
    return f"magnet:?xt=urn:btih:{info_hash}&dn={quote(title, safe='')}"


def parse_stream(
    stream: Mapping[str, Any],
    addon_id: str = "",
    addon_name: str = "",
) -> CandidateSource:
    """Convert one addon stream object into a CandidateSource."""
    title = _str_field(stream, "name") or "Unknown"
    details = [
        v
        for v in (_str_field(stream, "title"), _str_field(stream, "description"))
        if v
    ]
    description = "\n".join(details) or None

    resolution: Resolution | None = None
    quality: SourceQuality | None = None
    for text in _release_texts(stream):
        if resolution is None:
            resolution = parse_resolution(text)
        if quality is None:
            quality = parse_source_quality(text)
        if resolution is not None and quality is not None:
            break

    info_hash = extract_hash(stream)

    return CandidateSource(
        url=_str_field(stream, "url") or None,
        resolution=resolution,
        quality=quality,
        is_cached=detect_cached(stream),
        title=title,
        description=description,
        size=extract_size(stream),
        magnet=construct_magnet(info_hash, title) if info_hash else None,
        addon_id=addon_id,
        addon_name=addon_name,
    )


def parse_streams(
    streams: Iterable[Mapping[str, Any]],
    addon_id: str = "",
    addon_name: str = "",
) -> list[CandidateSource]:
    """Parse an addon's stream list, keeping the addon's order."""
    return [parse_stream(s, addon_id, addon_name) for s in streams]
