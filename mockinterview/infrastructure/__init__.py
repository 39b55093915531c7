"""Infrastructure components for the session client.

Low-level adapters: the directory REST client and the audio/speech stack.
The audio stack is imported on first use so that numpy, scipy and PortAudio
are only loaded when dictation is actually wanted.
"""

from .api import DirectoryRestClient, DirectoryApiError


def __getattr__(name):
    if name == "GoogleStreamingTranscriber":
        from .audio import GoogleStreamingTranscriber
        return GoogleStreamingTranscriber
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = ["DirectoryRestClient", "DirectoryApiError", "GoogleStreamingTranscriber"]
