"""
Audio Engine Module

Provides sample playback using pygame.mixer.
"""

from .playback import PlaybackController

__all__ = ['PlaybackController']
