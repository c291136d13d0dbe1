"""Audio capture, session and timer modules."""

from .capture import AudioInputDevice, PyAudioCapture
from .session import AudioSession
from .timers import TimerCoordinator, TimerKind

__all__ = [
    'AudioInputDevice',
    'PyAudioCapture',
    'AudioSession',
    'TimerCoordinator',
    'TimerKind',
]
