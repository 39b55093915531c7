"""Speech-to-text streaming."""

from .stt import GoogleStreamingTranscriber, fragments_from_response

__all__ = ["GoogleStreamingTranscriber", "fragments_from_response"]
