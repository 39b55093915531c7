"""
Transcript stream contract shared by every speech-to-text backend.

An adapter pushes events through the ``emit`` callable handed to ``start()``:
zero or more :class:`Fragment` events in production order, then exactly one
terminal :class:`StreamEnded` or :class:`StreamFailed`. Adapters never touch
session state directly; the session serializes their events onto the control
thread.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Union

from .errors import UnsupportedCapability


@dataclass(frozen=True)
class Fragment:
    """One unit of transcribed speech. Partial fragments are display-only."""
    text: str
    is_final: bool


@dataclass(frozen=True)
class StreamEnded:
    """The recognizer closed the stream (silence timeout or stop())."""


@dataclass(frozen=True)
class StreamFailed:
    """The recognizer failed. The adapter is already stopped."""
    reason: str


TranscriptEvent = Union[Fragment, StreamEnded, StreamFailed]
EventSink = Callable[[TranscriptEvent], None]


class TranscriptStreamAdapter(ABC):
    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the host can transcribe speech at all."""

    @abstractmethod
    def start(self, emit: EventSink) -> None:
        """
        Begin producing transcript events.

        Raises:
            UnsupportedCapability: If the host has no speech-to-text capability
        """

    @abstractmethod
    def stop(self) -> None:
        """
        Ask the stream to end. Safe to call at any time, including when idle.

        Events already in flight, typically the last final fragment, may
        still be emitted before the terminal event.
        """

    def is_streaming(self) -> bool:
        """True while events may still arrive from the last ``start()``."""
        return False

    @abstractmethod
    def name(self) -> str: ...


class UnavailableTranscriber(TranscriptStreamAdapter):
    """Stand-in when speech is disabled: every answer has to be typed."""

    def __init__(self, reason: str = "speech recognition disabled"):
        self.reason = reason

    def is_available(self) -> bool:
        return False

    def start(self, emit: EventSink) -> None:
        raise UnsupportedCapability(self.reason)

    def stop(self) -> None:
        pass

    def name(self) -> str:
        return "unavailable"
