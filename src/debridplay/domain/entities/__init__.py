from .quality import (
    ANY,
    RESOLUTIONS,
    SOURCE_QUALITIES,
    UNKNOWN_RANK,
    Resolution,
    SourceQuality,
    resolution_rank,
    source_quality_rank,
)
from .streaming import (
    CandidateSource,
    EpisodeParams,
    GatheringFailure,
    NoAddonsAvailable,
    PlaybackRequest,
    QualityRange,
    ResolutionAttempt,
    ResolutionRequestKey,
    ResolutionState,
    SelectionResult,
    StreamingError,
    StreamingSettings,
)

__all__ = [
    "ANY",
    "RESOLUTIONS",
    "SOURCE_QUALITIES",
    "UNKNOWN_RANK",
    "CandidateSource",
    "EpisodeParams",
    "GatheringFailure",
    "NoAddonsAvailable",
    "PlaybackRequest",
    "QualityRange",
    "Resolution",
    "ResolutionAttempt",
    "ResolutionRequestKey",
    "ResolutionState",
    "SelectionResult",
    "SourceQuality",
    "StreamingError",
    "StreamingSettings",
    "resolution_rank",
    "source_quality_rank",
]
