"""
Live microphone stream feeding the speech recognizer.
"""
import logging
import queue
import threading
from typing import Iterator, Optional

from ....config import (
    CHANNELS, SAMPLE_RATE_CAPTURE, SAMPLE_RATE_TARGET, FRAME_MS, MIC_GAIN, STREAM_QUEUE_TIMEOUT
)
from ....interview.errors import StreamError, UnsupportedCapability
from ....utils import import_quietly, with_suppressed_audio_warnings
from .processing import prepare_chunk

logger = logging.getLogger("audio_capture")


def _import_pyaudio():
    try:
        return import_quietly("pyaudio")
    except ImportError as e:
        raise UnsupportedCapability(f"pyaudio is not installed: {e}") from e


@with_suppressed_audio_warnings
def has_input_device() -> bool:
    """True when PortAudio reports at least one input-capable device."""
    try:
        pyaudio = _import_pyaudio()
    except UnsupportedCapability:
        return False
    pa = pyaudio.PyAudio()
    try:
        for i in range(pa.get_device_count()):
            info = pa.get_device_info_by_index(i)
            if int(info.get('maxInputChannels', 0) or 0) > 0:
                return True
        return False
    finally:
        pa.terminate()


class MicrophoneStream:
    """
    Opens the microphone and yields mono LINEAR16 chunks at the target rate.

    PortAudio fills a queue from its callback thread; :meth:`generator`
    drains it until :meth:`close` is called.
    """

    def __init__(self,
                 input_device: Optional[int] = None,
                 num_channels: int = CHANNELS,
                 sr_capture: int = SAMPLE_RATE_CAPTURE,
                 sr_target: int = SAMPLE_RATE_TARGET,
                 frame_ms: int = FRAME_MS,
                 mic_gain: float = MIC_GAIN):
        self.input_device = input_device
        self.num_channels = num_channels
        self.sr_capture = sr_capture
        self.sr_target = sr_target
        self.frame_size = int(sr_capture * frame_ms / 1000)
        self.mic_gain = mic_gain
        self._buff: "queue.Queue[Optional[bytes]]" = queue.Queue()
        self._pa = None
        self._stream = None
        self._continue = 0
        self._close_lock = threading.Lock()
        self.closed = True

    @with_suppressed_audio_warnings
    def open(self) -> "MicrophoneStream":
        """
        Raises:
            UnsupportedCapability: If pyaudio or an input device is missing
            StreamError: If the device exists but cannot be opened
        """
        pyaudio = _import_pyaudio()
        self._continue = pyaudio.paContinue
        self._pa = pyaudio.PyAudio()
        try:
            if self.input_device is None:
                try:
                    self._pa.get_default_input_device_info()
                except (IOError, OSError) as e:
                    raise UnsupportedCapability(f"No microphone available: {e}") from e
            logger.info(f"Opening microphone: device={self.input_device} channels={self.num_channels} "
                        f"rate={self.sr_capture} frame={self.frame_size}")
            self._stream = self._pa.open(
                format=pyaudio.paInt16,
                channels=self.num_channels,
                rate=self.sr_capture,
                input=True,
                input_device_index=self.input_device,
                frames_per_buffer=self.frame_size,
                stream_callback=self._fill_buffer,
            )
        except (IOError, OSError) as e:
            self._pa.terminate()
            self._pa = None
            raise StreamError(f"Failed to open microphone: {e}") from e
        except UnsupportedCapability:
            self._pa.terminate()
            self._pa = None
            raise
        self.closed = False
        return self

    def _fill_buffer(self, in_data, frame_count, time_info, status_flags):
        self._buff.put(in_data)
        return None, self._continue

    def close(self) -> None:
        """Stop the device and end :meth:`generator`. Safe to call twice."""
        with self._close_lock:
            if self.closed:
                return
            self.closed = True
        self._buff.put(None)
        try:
            if self._stream is not None:
                self._stream.stop_stream()
                self._stream.close()
        finally:
            self._stream = None
            if self._pa is not None:
                self._pa.terminate()
                self._pa = None
        logger.info("Microphone closed")

    def generator(self) -> Iterator[bytes]:
        while not self.closed:
            try:
                chunk = self._buff.get(timeout=STREAM_QUEUE_TIMEOUT)
            except queue.Empty:
                continue
            if chunk is None:
                return
            data = [chunk]

            # Drain whatever else is buffered so the recognizer gets fewer, larger requests
            while True:
                try:
                    chunk = self._buff.get(block=False)
                except queue.Empty:
                    break
                if chunk is None:
                    self.closed = True
                    break
                data.append(chunk)

            yield prepare_chunk(b"".join(data), self.num_channels, self.sr_capture, self.sr_target, self.mic_gain)
