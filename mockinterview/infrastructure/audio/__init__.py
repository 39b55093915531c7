"""
Audio capture and speech recognition.

- processing: microphone stream and PCM conversions
- speech: streaming speech-to-text
"""

from .processing import MicrophoneStream, has_input_device
from .speech import GoogleStreamingTranscriber, fragments_from_response

__all__ = [
    "MicrophoneStream",
    "has_input_device",
    "GoogleStreamingTranscriber",
    "fragments_from_response"
]
