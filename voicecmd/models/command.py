"""Command analysis and execution data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


class ActionStatus(Enum):
    """Outcome of running an action locally."""
    EXECUTED = "executed"
    FAILED = "failed"
    UNSUPPORTED = "unsupported"


@dataclass
class TranscriptionResult:
    """Result of a transcription request."""
    text: str
    confidence: float
    processing_time: float
    timestamp: datetime
    service: str
    language: str = "en-US"
    alternatives: Optional[list] = None


@dataclass
class CommandAnalysis:
    """Intent inferred from a transcript.

    ``parameters`` is kept as the JSON-encoded string the intent service
    returns; the pipeline decodes it.
    """
    action: str
    parameters: str = "{}"


@dataclass
class ActionResult:
    """Result of dispatching an action to the local executor."""
    status: ActionStatus
    message: str
    uri: Optional[str] = None

    @property
    def executed(self) -> bool:
        return self.status is ActionStatus.EXECUTED


@dataclass
class PipelineResult:
    """Everything produced while processing one utterance."""
    success: bool
    transcription: Optional[str] = None
    action: Optional[str] = None
    parameters: Dict[str, str] = field(default_factory=dict)
    action_result: Optional[ActionResult] = None
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None
