"""Services layer for voicecmd application logic."""

from .recording_service import RecordingService
from .command_pipeline import CommandPipeline, parse_parameters
from .status_publisher import StatusPublisher, STATUS_TOPIC

__all__ = [
    "RecordingService",
    "CommandPipeline",
    "parse_parameters",
    "StatusPublisher",
    "STATUS_TOPIC",
]
