"""UI-related data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


READY_STATUS = "Ready to listen"


class ButtonState(Enum):
    """Affordances of the single toggle control."""
    IDLE = "idle"
    LISTENING = "listening"    # pulsing
    PROCESSING = "processing"  # spinning, toggle disabled


@dataclass
class AssistantStatus:
    """Status information rendered by the terminal UI."""
    current_status: str = READY_STATUS
    button_state: ButtonState = ButtonState.IDLE
    transcription: Optional[str] = None
    action: Optional[str] = None
    parameters: Dict[str, str] = field(default_factory=dict)
    peak_level: float = 0.0

    @property
    def toggle_enabled(self) -> bool:
        return self.button_state is not ButtonState.PROCESSING
