"""Terminal user interface."""

from .keyboard_input import create_input_handler, KeyboardInputHandler, SimpleInputHandler
from .status_screen import StatusScreen

__all__ = [
    "create_input_handler",
    "KeyboardInputHandler",
    "SimpleInputHandler",
    "StatusScreen",
]
