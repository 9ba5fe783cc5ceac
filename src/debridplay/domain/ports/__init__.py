from .candidates import AddonSourcePort, CandidateGatheringPort
from .playback import PlaybackConsumerPort
from .settings import StreamingSettingsPort

__all__ = [
    "AddonSourcePort",
    "CandidateGatheringPort",
    "PlaybackConsumerPort",
    "StreamingSettingsPort",
]
