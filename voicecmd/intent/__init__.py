"""Intent extraction for voicecmd."""

from .chatgpt_intent_engine import ChatGPTIntentEngine, IntentEngine

__all__ = [
    "ChatGPTIntentEngine",
    "IntentEngine",
]
