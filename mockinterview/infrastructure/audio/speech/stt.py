"""
Streaming speech-to-text using Google Cloud Speech.
"""
import importlib.util
import logging
import threading
from typing import Callable, List, Optional

from ....config import LANGUAGE_CODE, SAMPLE_RATE_TARGET, ENABLE_AUTOMATIC_PUNCTUATION
from ....interview.transcript import (
    EventSink, Fragment, StreamEnded, StreamFailed, TranscriptStreamAdapter
)
from ....interview.errors import UnsupportedCapability
from ..processing.capture import MicrophoneStream, has_input_device

logger = logging.getLogger("speech_stt")


def has_credentials() -> bool:
    """Whether Application Default Credentials resolve on this host."""
    import google.auth
    from google.auth.exceptions import DefaultCredentialsError

    try:
        google.auth.default()
    except DefaultCredentialsError as e:
        logger.warning("No Google credentials for speech recognition: %s", e)
        return False
    return True


def fragments_from_response(response) -> List[Fragment]:
    """
    Turn one StreamingRecognizeResponse into fragments.

    Each final result becomes its own final fragment; interim results are
    joined into a single trailing partial fragment.
    """
    fragments: List[Fragment] = []
    interim = ""
    for result in response.results:
        if not result.alternatives:
            continue
        text = result.alternatives[0].transcript
        if result.is_final:
            fragments.append(Fragment(text=text, is_final=True))
        else:
            interim += text
    if interim:
        fragments.append(Fragment(text=interim, is_final=False))
    return fragments


class GoogleStreamingTranscriber(TranscriptStreamAdapter):
    """
    Transcribes the microphone with ``streaming_recognize`` and interim results.

    Recognition runs on a worker thread. ``stop()`` closes the microphone,
    which ends the request stream and lets the recognizer finish, after
    which the worker emits :class:`StreamEnded`.
    """

    def __init__(self,
                 language_code: str = LANGUAGE_CODE,
                 sample_rate: int = SAMPLE_RATE_TARGET,
                 microphone_factory: Optional[Callable[[], MicrophoneStream]] = None):
        self.language_code = language_code
        self.sample_rate = sample_rate
        self.microphone_factory = microphone_factory or (lambda: MicrophoneStream(sr_target=sample_rate))
        self._mic: Optional[MicrophoneStream] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def name(self) -> str:
        return "google_streaming"

    def is_available(self) -> bool:
        try:
            spec = importlib.util.find_spec("google.cloud.speech")
        except ModuleNotFoundError:
            spec = None
        if spec is None:
            logger.warning("google-cloud-speech is not installed")
            return False
        if not has_credentials():
            return False
        if not has_input_device():
            logger.warning("No input device found for speech capture")
            return False
        return True

    def is_streaming(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self, emit: EventSink) -> None:
        try:
            from google.cloud import speech
        except ImportError as e:
            raise UnsupportedCapability(f"google-cloud-speech is not installed: {e}") from e
        if not has_credentials():
            raise UnsupportedCapability("No Google credentials for speech recognition")

        self.stop()
        mic = self.microphone_factory().open()
        with self._lock:
            self._mic = mic
            self._thread = threading.Thread(
                target=self._run, args=(speech, mic, emit), name="speech-stream", daemon=True
            )
            self._thread.start()
        logger.info("Streaming recognition started (%s, %d Hz)", self.language_code, self.sample_rate)

    def stop(self) -> None:
        # The worker keeps running until the recognizer flushes its last result
        with self._lock:
            mic, self._mic = self._mic, None
        if mic is not None:
            mic.close()

    def _run(self, speech, mic: MicrophoneStream, emit: EventSink) -> None:
        config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=self.sample_rate,
            language_code=self.language_code,
            enable_automatic_punctuation=ENABLE_AUTOMATIC_PUNCTUATION,
        )
        streaming_config = speech.StreamingRecognitionConfig(config=config, interim_results=True)

        try:
            client = speech.SpeechClient()
            requests = (speech.StreamingRecognizeRequest(audio_content=chunk) for chunk in mic.generator())
            for response in client.streaming_recognize(config=streaming_config, requests=requests):
                for fragment in fragments_from_response(response):
                    emit(fragment)
        except Exception as e:
            # Worker boundary: every failure ends the stream as a StreamFailed event
            logger.error("Streaming recognition failed: %s", e)
            mic.close()
            emit(StreamFailed(reason=str(e) or e.__class__.__name__))
            return

        mic.close()
        logger.info("Streaming recognition ended")
        emit(StreamEnded())
