"""Transcription module for voicecmd."""

from .base import AbstractTranscriptionBackend
from .google_backend import GoogleSpeechBackend

__all__ = [
    "AbstractTranscriptionBackend",
    "GoogleSpeechBackend",
]
