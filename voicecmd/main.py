"""Main application entry point for voicecmd."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.live import Live

from .actions.executor import ActionExecutor
from .config import VoiceCommandConfig
from .errors import VoiceCommandError
from .intent.chatgpt_intent_engine import ChatGPTIntentEngine
from .models.command import PipelineResult
from .models.recording import EncodedRecording
from .models.ui import ButtonState, READY_STATUS
from .services.command_pipeline import CommandPipeline
from .services.recording_service import RecordingService
from .services.status_publisher import StatusPublisher
from .storage.history_store import CommandHistoryStore
from .transcription.google_backend import GoogleSpeechBackend
from .ui.keyboard_input import QUIT_KEYS, TOGGLE_KEYS, create_input_handler
from .ui.status_screen import StatusScreen

logger = logging.getLogger(__name__)

__version__ = "0.1.0"

STATUS_RESET_SECONDS = 5.0


class VoiceAssistant:
    """Wires the recorder, the command pipeline and the terminal UI together."""

    def __init__(self, config_path: Optional[str] = None, log_level: Optional[str] = None):
        self.config = VoiceCommandConfig(config_path)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)

        self.console = Console()
        self.recorder: Optional[RecordingService] = None
        self.pipeline: Optional[CommandPipeline] = None
        self.screen: Optional[StatusScreen] = None
        self.publisher: Optional[StatusPublisher] = None
        self.input_handler = None

        self.processing = False
        self._once = False
        self.last_result: Optional[PipelineResult] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._finished: Optional[asyncio.Event] = None
        self._tasks = set()

    def init(self, loop: asyncio.AbstractEventLoop) -> None:
        """Initialize services on the running loop."""
        logger.info("Initializing services...")
        self._loop = loop
        self._finished = asyncio.Event()

        backend = GoogleSpeechBackend(
            credentials_path=self.config.get_google_credentials_path(),
            language=self.config.get('google_cloud.language', 'en-US'),
            use_enhanced=self.config.get('google_cloud.use_enhanced_model', True),
            enable_automatic_punctuation=self.config.get('google_cloud.enable_automatic_punctuation', True),
            timeout_seconds=self.config.get('google_cloud.timeout_seconds', 10.0),
        )
        if not backend.initialize():
            raise RuntimeError("Google Speech backend failed to initialize")

        intent_engine = ChatGPTIntentEngine(
            api_key=self.config.get_openai_api_key(),
            model=self.config.get('openai.model', 'gpt-4o-mini'),
            timeout_seconds=self.config.get('openai.timeout_seconds', 15.0),
        )

        self.publisher = StatusPublisher()
        self.screen = StatusScreen(self.console)
        self.screen.subscribe()

        self.pipeline = CommandPipeline(
            transcription_backend=backend,
            intent_engine=intent_engine,
            executor=ActionExecutor(),
            publisher=self.publisher,
            history=CommandHistoryStore(self.config.get_data_directory()),
        )
        self.recorder = RecordingService.from_config(
            self.config,
            scheduler=loop,
            on_recording_complete=self._on_recording_complete,
            on_recording_error=self._on_recording_error,
        )
        logger.info("Services ready")

    def toggle(self) -> None:
        """Handle the single toggle control. Ignored while processing."""
        if self.processing:
            logger.debug("Toggle ignored while processing")
            return

        if self.recorder.is_recording:
            self.recorder.stop()
            if self.screen.status.button_state is ButtonState.LISTENING:
                # Stopped before the device was granted, nothing to process
                self.screen.set_button_state(ButtonState.IDLE)
                self.screen.set_status_text(READY_STATUS)
            return

        self.screen.set_button_state(ButtonState.LISTENING)
        self.screen.set_status_text("Listening...")
        self.screen.clear_command()
        self._spawn(self._start_recording())

    async def _start_recording(self) -> None:
        started = await self.recorder.start()
        if not started and self.recorder.error:
            self.screen.set_button_state(ButtonState.IDLE)
            self.publisher.error("Microphone Error", self.recorder.error)
            if self._once:
                self._finished.set()
        elif not started and not self.recorder.is_recording:
            self.screen.set_button_state(ButtonState.IDLE)

    def _on_recording_complete(self, recording: EncodedRecording) -> None:
        self.processing = True
        self.screen.set_button_state(ButtonState.PROCESSING)
        self._spawn(self._process(recording))

    def _on_recording_error(self, error: VoiceCommandError) -> None:
        self.screen.set_button_state(ButtonState.IDLE)
        self.publisher.error("Microphone Error", str(error))
        if self._once:
            self._finished.set()

    async def _process(self, recording: EncodedRecording) -> None:
        try:
            self.last_result = await self.pipeline.process(recording)
            self.screen.show_command(self.last_result.transcription, self.last_result.action,
                                     self.last_result.parameters)
        finally:
            self.processing = False
            self.screen.set_button_state(ButtonState.IDLE)
            self._loop.call_later(STATUS_RESET_SECONDS, self.screen.reset_status)
            if self._once:
                self._finished.set()

    def _spawn(self, coro) -> None:
        task = self._loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_key(self, key: str) -> None:
        if key in QUIT_KEYS:
            self._finished.set()
        elif key in TOGGLE_KEYS:
            self.toggle()

    def _key_from_input_thread(self, key: str) -> bool:
        self._loop.call_soon_threadsafe(self._on_key, key)
        return key not in QUIT_KEYS

    async def run_interactive(self) -> None:
        """Toggle recording with the keyboard until the user quits."""
        self._once = False
        self.init(asyncio.get_running_loop())
        self.input_handler = create_input_handler(self._key_from_input_thread)
        self.input_handler.start()

        try:
            with Live(self.screen.build_view(), console=self.console,
                      refresh_per_second=8, transient=True) as live:
                while not self._finished.is_set():
                    stats = self.recorder.get_recording_stats()
                    self.screen.status.peak_level = stats.peak_level if stats and stats.is_recording else 0.0
                    live.update(self.screen.build_view())
                    await asyncio.sleep(0.1)
        finally:
            self.cleanup()

    async def run_once(self) -> Optional[PipelineResult]:
        """Record one utterance (auto-stopped), process it and return the result."""
        self._once = True
        self.init(asyncio.get_running_loop())
        try:
            self.console.print("🎙️  Listening... (stops after silence)", style="bold green")
            self.toggle()
            await self._finished.wait()
        finally:
            self.cleanup()

        self.screen.show_status()
        return self.last_result

    def cleanup(self) -> None:
        if self.input_handler:
            self.input_handler.stop()
            self.input_handler = None
        if self.recorder:
            self.recorder.teardown()
        for task in list(self._tasks):
            task.cancel()
        if self.pipeline:
            self.pipeline.transcription_backend.cleanup()
        if self.screen:
            self.screen.unsubscribe()
        logger.info("voicecmd shut down")


def setup_logging(config: VoiceCommandConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/voicecmd.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("voicecmd starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def main() -> None:
    """Main entry point for voicecmd."""
    parser = argparse.ArgumentParser(
        description="voicecmd - speak a command, run it locally",
        epilog="Interactive keys: space/enter=start/stop recording, q=quit"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in defaults)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Record a single command, execute it and exit"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"voicecmd v{__version__}"
    )

    args = parser.parse_args()

    try:
        assistant = VoiceAssistant(args.config, args.log_level)
        if args.once:
            result = asyncio.run(assistant.run_once())
            if result is None or not result.success:
                sys.exit(1)
        else:
            asyncio.run(assistant.run_interactive())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except (ValueError, FileNotFoundError, RuntimeError) as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
