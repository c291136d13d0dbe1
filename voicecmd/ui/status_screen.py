"""Terminal status screen for the voice command toggle."""

import logging
from typing import Dict, Optional

from pubsub import pub
from rich.align import Align
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table
from rich.text import Text

from ..models.events import StatusEvent, StatusLevel
from ..models.ui import AssistantStatus, ButtonState, READY_STATUS
from ..services.status_publisher import STATUS_TOPIC

logger = logging.getLogger(__name__)


LEVEL_STYLES = {
    StatusLevel.INFO: "blue",
    StatusLevel.SUCCESS: "green",
    StatusLevel.WARNING: "yellow",
    StatusLevel.ERROR: "bold red",
}


class StatusScreen:
    """Renders the toggle, the status line and the last command.

    Listens on the status topic; the pipeline never calls into the UI.
    """

    def __init__(self, console: Optional[Console] = None, topic: str = STATUS_TOPIC):
        self.console = console or Console()
        self.topic = topic
        self.status = AssistantStatus()
        self.last_event: Optional[StatusEvent] = None
        self._subscribed = False

    def subscribe(self) -> None:
        if not self._subscribed:
            pub.subscribe(self.on_status, self.topic)
            self._subscribed = True

    def unsubscribe(self) -> None:
        if self._subscribed:
            pub.unsubscribe(self.on_status, self.topic)
            self._subscribed = False

    def on_status(self, event: StatusEvent) -> None:
        """Pub/sub listener for status events."""
        self.last_event = event
        if event.level is StatusLevel.ERROR and event.title == "Action Failed":
            self.status.current_status = f"Failed: {event.message}"
        elif event.level is StatusLevel.ERROR:
            self.status.current_status = f"Error: {event.message}"
        else:
            self.status.current_status = event.message

    def set_button_state(self, state: ButtonState) -> None:
        self.status.button_state = state

    def set_status_text(self, text: str) -> None:
        self.status.current_status = text

    def reset_status(self) -> None:
        """Back to the ready line once an action has been shown for a while."""
        if self.status.button_state is ButtonState.IDLE:
            self.status.current_status = READY_STATUS

    def show_command(self, transcription: Optional[str], action: Optional[str],
                     parameters: Optional[Dict[str, str]] = None) -> None:
        self.status.transcription = transcription
        self.status.action = action
        self.status.parameters = parameters or {}

    def clear_command(self) -> None:
        self.show_command(None, None)

    def build_view(self) -> RenderableType:
        """Build the full screen as a rich renderable."""
        parts = [
            Align.center(Text("Offline Voice Assistant", style="bold blue")),
            Align.center(self._status_line()),
            Text(""),
            Align.center(self._toggle()),
        ]

        if self.status.transcription:
            parts.append(Panel(self.status.transcription, title="✅ Transcription",
                               border_style="green"))

        if self.status.action:
            table = Table(show_header=False, box=None)
            table.add_column("key", style="bold")
            table.add_column("value")
            table.add_row("Action", self.status.action)
            for key, value in self.status.parameters.items():
                table.add_row(key, value)
            parts.append(Panel(table, title="Action", border_style="cyan"))

        parts.append(Text("space/enter = start/stop   q = quit", style="dim"))
        return Group(*parts)

    def show_status(self) -> None:
        """Print the screen once (non-live mode)."""
        self.console.print(self.build_view())

    def _status_line(self) -> Text:
        style = "dim"
        if self.last_event is not None and self.status.current_status != READY_STATUS:
            style = LEVEL_STYLES[self.last_event.level]
        return Text(self.status.current_status, style=style)

    def _toggle(self) -> RenderableType:
        state = self.status.button_state
        if state is ButtonState.PROCESSING:
            return Spinner("dots", text=Text(" Processing voice command", style="yellow"))
        if state is ButtonState.LISTENING:
            level = int(self.status.peak_level * 20)
            meter = "█" * level
            return Text(f"🔴 LISTENING [{meter:<20}]", style="bold red blink")
        return Text("🎙️  Press space to speak", style="bold green")
