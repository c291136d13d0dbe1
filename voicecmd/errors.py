"""Error taxonomy for voice command capture and processing."""


class VoiceCommandError(Exception):
    """Base class for all voicecmd errors."""


class PermissionDenied(VoiceCommandError):
    """The user or the OS refused access to the microphone."""


class DeviceUnavailable(VoiceCommandError):
    """No audio capture capability on this platform."""


class DeviceRuntimeError(VoiceCommandError):
    """The capture device failed while a recording was in progress."""


class TranscriptionServiceError(VoiceCommandError):
    """Speech-to-text request failed (timeout, malformed audio, unavailable)."""


class IntentServiceError(VoiceCommandError):
    """Intent extraction request failed."""


class ParameterParseError(VoiceCommandError):
    """Intent parameters were not a JSON object of string pairs."""


class ActionUnsupported(VoiceCommandError):
    """No local handler matches the inferred action."""
