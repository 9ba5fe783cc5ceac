from .gathering import AddonFanoutGatherer
from .playback import PlaybackUseCase, ResolutionRequestTracker

__all__ = ["AddonFanoutGatherer", "PlaybackUseCase", "ResolutionRequestTracker"]
