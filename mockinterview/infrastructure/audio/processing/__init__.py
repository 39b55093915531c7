"""Audio processing and microphone capture modules."""

from .processing import (
    pcm16_to_float,
    stereo_to_mono,
    resample,
    to_pcm16_bytes,
    prepare_chunk
)
from .capture import MicrophoneStream, has_input_device

__all__ = [
    "MicrophoneStream",
    "has_input_device",
    "pcm16_to_float",
    "stereo_to_mono",
    "resample",
    "to_pcm16_bytes",
    "prepare_chunk"
]
