"""Data models for the voicecmd application."""

from .recording import EncodedRecording, RecordingStats, RecordingStatus, pcm_mime_type
from .command import (
    ActionResult,
    ActionStatus,
    CommandAnalysis,
    PipelineResult,
    TranscriptionResult,
)
from .events import StatusEvent, StatusLevel
from .ui import AssistantStatus, ButtonState

__all__ = [
    "EncodedRecording",
    "RecordingStats",
    "RecordingStatus",
    "pcm_mime_type",
    "ActionResult",
    "ActionStatus",
    "CommandAnalysis",
    "PipelineResult",
    "TranscriptionResult",
    "StatusEvent",
    "StatusLevel",
    "AssistantStatus",
    "ButtonState",
]
