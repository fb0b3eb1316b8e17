from .frames import EpicycleFrame, EpicycleVector
from .profile import PlaybackProfile

__all__ = [
    "EpicycleFrame",
    "EpicycleVector",
    "PlaybackProfile",
]
