"""Recording-related data models."""

import base64
import binascii
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable


DATA_URI_PREFIX = "data:"
BASE64_MARKER = ";base64,"


class RecordingStatus(Enum):
    """Lifecycle of a single audio session."""
    IDLE = "idle"
    OPENING = "opening"      # Waiting on device permission
    RECORDING = "recording"
    STOPPING = "stopping"
    COMPLETED = "completed"
    FAILED = "failed"


def pcm_mime_type(sample_rate: int = 16000, channels: int = 1) -> str:
    """MIME type for raw 16-bit linear PCM (RFC 2586)."""
    return f"audio/L16;rate={sample_rate};channels={channels}"


@dataclass(frozen=True)
class EncodedRecording:
    """Finished recording: audio payload plus its declared MIME type."""
    data: bytes
    mime_type: str

    @classmethod
    def from_chunks(cls, chunks: Iterable[bytes], mime_type: str) -> "EncodedRecording":
        """Concatenate chunks in arrival order."""
        return cls(data=b"".join(chunks), mime_type=mime_type)

    @classmethod
    def from_data_uri(cls, data_uri: str) -> "EncodedRecording":
        """Parse a ``data:<mime>;base64,<payload>`` envelope.

        Raises:
            ValueError: If the envelope is not a base64 data URI
        """
        if not data_uri.startswith(DATA_URI_PREFIX) or BASE64_MARKER not in data_uri:
            raise ValueError("Audio envelope is not a base64 data URI")

        header, payload = data_uri[len(DATA_URI_PREFIX):].split(BASE64_MARKER, 1)
        try:
            data = base64.b64decode(payload, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Audio envelope payload is not valid base64: {e}") from e
        return cls(data=data, mime_type=header)

    @property
    def data_uri(self) -> str:
        """Text-safe envelope handed to the transcription service."""
        payload = base64.b64encode(self.data).decode("ascii")
        return f"{DATA_URI_PREFIX}{self.mime_type}{BASE64_MARKER}{payload}"

    @property
    def mime_parameters(self) -> Dict[str, str]:
        """Parameters declared after the base MIME type, e.g. ``rate``."""
        params = {}
        for part in self.mime_type.split(";")[1:]:
            if "=" in part:
                key, value = part.split("=", 1)
                params[key.strip().lower()] = value.strip()
        return params

    @property
    def is_empty(self) -> bool:
        return not self.data

    def __len__(self) -> int:
        return len(self.data)


@dataclass
class RecordingStats:
    """Audio recording statistics."""
    is_recording: bool
    duration_seconds: float
    total_chunks: int
    total_bytes: int
    peak_level: float = 0.0
