"""Event models for pub/sub status publishing."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class StatusLevel(Enum):
    """Severity of a status event, mirrors how the UI colours it."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class StatusEvent:
    """User-facing status update emitted by the pipeline or the recorder."""
    level: StatusLevel
    title: str
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_error(self) -> bool:
        return self.level is StatusLevel.ERROR
