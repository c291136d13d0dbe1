"""Cross-platform keyboard input handling for the terminal UI."""

import sys
import threading
from typing import Callable, Optional, Union
import logging

logger = logging.getLogger(__name__)


TOGGLE_KEYS = (" ", "\r", "\n")
QUIT_KEYS = ("q", "\x03")  # q or Ctrl-C in raw mode


class KeyboardInputHandler:
    """Reads single keypresses on a background thread.

    The callback runs on the input thread; callers that own loop state must
    hand the key over with ``loop.call_soon_threadsafe``.
    """

    def __init__(self, callback: Callable[[str], bool]):
        """Initialize keyboard handler.

        Args:
            callback: Function that takes a key and returns True to continue, False to quit
        """
        self.callback = callback
        self.running = False
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the keyboard input handler."""
        if self.running:
            return

        self.running = True
        self.thread = threading.Thread(target=self._input_loop, daemon=True)
        self.thread.name = "KeyboardInputThread"
        self.thread.start()
        logger.info("Keyboard input handler started")

    def stop(self) -> None:
        """Stop the keyboard input handler."""
        self.running = False
        if self.thread and self.thread is not threading.current_thread():
            self.thread.join(timeout=1.0)
        logger.info("Keyboard input handler stopped")

    def _input_loop(self) -> None:
        """Main input handling loop."""
        while self.running:
            try:
                key = self._get_key()
            except OSError as e:
                logger.error(f"Error reading keyboard: {e}")
                break
            if key:
                logger.debug(f"Key detected: {key!r}")
                if not self.callback(key):
                    logger.info("Callback returned False, breaking input loop")
                    break
        self.running = False
        logger.info("Keyboard input loop ended")

    def _get_key(self) -> Optional[str]:
        """Get a single keypress, waiting at most ~0.1s."""
        if sys.platform == "win32":
            return self._get_key_windows()
        return self._get_key_unix()

    def _get_key_windows(self) -> Optional[str]:
        import msvcrt
        import time

        if msvcrt.kbhit():
            return msvcrt.getwch().lower()
        time.sleep(0.05)
        return None

    def _get_key_unix(self) -> Optional[str]:
        import select
        import termios
        import tty

        if not select.select([sys.stdin], [], [], 0.1)[0]:
            return None

        # Raw mode just long enough to read one character
        old_settings = termios.tcgetattr(sys.stdin)
        try:
            tty.setraw(sys.stdin.fileno())
            key = sys.stdin.read(1)
        finally:
            termios.tcsetattr(sys.stdin, termios.TCSADRAIN, old_settings)
        return key.lower()


class SimpleInputHandler:
    """Line-based fallback for non-interactive stdin (pipes, IDE consoles)."""

    def __init__(self, callback: Callable[[str], bool]):
        self.callback = callback
        self.running = False
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self.running:
            return

        self.running = True
        self.thread = threading.Thread(target=self._input_loop, daemon=True)
        self.thread.start()
        logger.info("Simple input handler started")

    def stop(self) -> None:
        self.running = False
        logger.info("Simple input handler stopped")

    def _input_loop(self) -> None:
        """Simple input loop using input(); an empty line toggles."""
        while self.running:
            try:
                user_input = input().strip().lower()
            except EOFError:
                self.callback("q")
                break

            key = user_input[0] if user_input else " "
            if not self.callback(key):
                break
        self.running = False


def create_input_handler(callback: Callable[[str], bool]) -> Union[KeyboardInputHandler, SimpleInputHandler]:
    """Create the best available input handler for the current terminal.

    Args:
        callback: Function that takes a key and returns True to continue, False to quit

    Returns:
        An input handler instance
    """
    if sys.stdin.isatty():
        return KeyboardInputHandler(callback)
    logger.warning("stdin is not a terminal, using line-based input")
    return SimpleInputHandler(callback)
