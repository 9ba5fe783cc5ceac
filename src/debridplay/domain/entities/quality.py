"""Quality taxonomy for stream selection.

Two fixed total orders, best first: video resolution and source quality
(release tier). A label's rank is its index in the ordered tuple, so a
lower rank means a better stream. Reordering these tuples changes
selection outcomes everywhere; bump TAXONOMY_VERSION when doing so.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

from enum import Enum

TAXONOMY_VERSION = 1

ANY = "any"


class Resolution(str, Enum):
    """Video frame-size tiers (best first)."""

    UHD_4K = "2160p"
    QHD_1440P = "1440p"
    FHD_1080P = "1080p"
    HD_720P = "720p"
    SD_480P = "480p"
    SD_360P = "360p"


class SourceQuality(str, Enum):
    """Release/encode tiers (best first)."""

    BLURAY_REMUX = "BluRay REMUX"
    BLURAY = "BluRay"
    WEB_DL = "WEB-DL"
    WEBRIP = "WEBRip"
    HDTV = "HDTV"
    DVDRIP = "DVDRip"
    HDRIP = "HDRip"
    SCR = "SCR"
    TC = "TC"
    TS = "TS"
    CAM = "CAM"


RESOLUTIONS: tuple[Resolution, ...] = tuple(Resolution)
SOURCE_QUALITIES: tuple[SourceQuality, ...] = tuple(SourceQuality)

# Reserved rank for missing or unrecognized labels. Sorts after every
# known tier; range filtering treats it as always passable.
UNKNOWN_RANK = max(len(RESOLUTIONS), len(SOURCE_QUALITIES))

# --- Label lookup tables (lower-cased, separators stripped) ---

_RESOLUTION_ALIASES: dict[str, Resolution] = {
    "4k": Resolution.UHD_4K,
    "uhd": Resolution.UHD_4K,
    "2k": Resolution.QHD_1440P,
    "qhd": Resolution.QHD_1440P,
    "fhd": Resolution.FHD_1080P,
    "fullhd": Resolution.FHD_1080P,
    "1080i": Resolution.FHD_1080P,
    "hd": Resolution.HD_720P,
    "576p": Resolution.SD_480P,
    "sd": Resolution.SD_480P,
}

_SOURCE_QUALITY_ALIASES: dict[str, SourceQuality] = {
    "remux": SourceQuality.BLURAY_REMUX,
    "blurayremux": SourceQuality.BLURAY_REMUX,
    "bdremux": SourceQuality.BLURAY_REMUX,
    "bluray": SourceQuality.BLURAY,
    "bdrip": SourceQuality.BLURAY,
    "brrip": SourceQuality.BLURAY,
    "webdl": SourceQuality.WEB_DL,
    "web": SourceQuality.WEB_DL,
    "webrip": SourceQuality.WEBRIP,
    "hdtv": SourceQuality.HDTV,
    "dvdrip": SourceQuality.DVDRIP,
    "hdrip": SourceQuality.HDRIP,
    "scr": SourceQuality.SCR,
    "screener": SourceQuality.SCR,
    "dvdscr": SourceQuality.SCR,
    "tc": SourceQuality.TC,
    "telecine": SourceQuality.TC,
    "ts": SourceQuality.TS,
    "telesync": SourceQuality.TS,
    "hdts": SourceQuality.TS,
    "cam": SourceQuality.CAM,
    "camrip": SourceQuality.CAM,
    "hdcam": SourceQuality.CAM,
}


def _normalize(label: object) -> str:
    if isinstance(label, Enum):
        label = label.value
    if not isinstance(label, str):
        return ""
    return "".join(ch for ch in label.strip().lower() if ch not in " -_.")


_RESOLUTION_LOOKUP: dict[str, Resolution] = {
    **{_normalize(r): r for r in RESOLUTIONS},
    **_RESOLUTION_ALIASES,
}
_SOURCE_QUALITY_LOOKUP: dict[str, SourceQuality] = {
    **{_normalize(q): q for q in SOURCE_QUALITIES},
    **_SOURCE_QUALITY_ALIASES,
}


def parse_resolution_label(label: object) -> Resolution | None:
    """Map a free-form label to a Resolution, or None when unrecognized."""
    return _RESOLUTION_LOOKUP.get(_normalize(label))


def parse_source_quality_label(label: object) -> SourceQuality | None:
    """Map a free-form label to a SourceQuality, or None when unrecognized."""
    return _SOURCE_QUALITY_LOOKUP.get(_normalize(label))


def resolution_rank(label: object) -> int:
    """Rank of a resolution label (0 = best). Unknown labels get UNKNOWN_RANK."""
    resolution = parse_resolution_label(label)
    if resolution is None:
        return UNKNOWN_RANK
    return RESOLUTIONS.index(resolution)


def source_quality_rank(label: object) -> int:
    """Rank of a source-quality label (0 = best). Unknown labels get UNKNOWN_RANK."""
    quality = parse_source_quality_label(label)
    if quality is None:
        return UNKNOWN_RANK
    return SOURCE_QUALITIES.index(quality)
