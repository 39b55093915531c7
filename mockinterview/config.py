"""
Mock Interview Configuration
============================

This file contains ALL configuration for the mock interview session client.
- User settings at the top (things users might want to change)
- Internal constants at the bottom (technical defaults)
"""
import os
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# USER SETTINGS - Edit these to customize the session client
# =============================================================================

# Interview directory backend
API_BASE_URL = "http://localhost:5000/api"
API_TOKEN = None  # Optional: bearer token forwarded to the backend

# Speech settings
ENABLE_SPEECH = True
LANGUAGE_CODE = "es-ES"

# Logging
LOG_FILE = "./_sessions/session.log"
LOG_LEVEL = "INFO"


# =============================================================================
# INTERNAL CONSTANTS - Don't change these unless you know what you're doing
# =============================================================================

# Timers
TICK_SECONDS = 1.0
# Ticks a manual stop waits for the recognizer to flush before deciding
STOP_GRACE_TICKS = 3

# HTTP
REQUEST_TIMEOUT = 15

# Microphone capture
SAMPLE_RATE_CAPTURE = 48000
SAMPLE_RATE_TARGET = 16000
CHANNELS = 1
FRAME_MS = 100
MIC_GAIN = 1.0

# Streaming recognition
STREAM_QUEUE_TIMEOUT = 0.5
ENABLE_AUTOMATIC_PUNCTUATION = True

# Interview statuses understood by the backend
STATUS_SCHEDULED = "scheduled"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"

_TRUTHY = {"1", "true", "t", "yes", "y", "on"}


# =============================================================================
# MAIN CONFIG OBJECT
# =============================================================================

@dataclass
class Config:
    """Main configuration object."""
    api_base_url: str
    api_token: Optional[str] = API_TOKEN
    language_code: str = LANGUAGE_CODE
    enable_speech: bool = ENABLE_SPEECH
    log_file: str = LOG_FILE
    log_level: str = LOG_LEVEL
    tick_seconds: float = TICK_SECONDS
    request_timeout: int = REQUEST_TIMEOUT


def _getenv_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUTHY


def get_config() -> Config:
    """Load configuration."""
    api_url = os.getenv("MOCKINTERVIEW_API_URL", API_BASE_URL).strip()
    if not api_url:
        raise ValueError("Please set API_BASE_URL in config.py or MOCKINTERVIEW_API_URL in the environment")

    return Config(
        api_base_url=api_url.rstrip("/"),
        api_token=os.getenv("MOCKINTERVIEW_API_TOKEN") or API_TOKEN,
        language_code=os.getenv("MOCKINTERVIEW_LANGUAGE") or LANGUAGE_CODE,
        enable_speech=_getenv_bool("MOCKINTERVIEW_ENABLE_SPEECH", ENABLE_SPEECH),
        log_file=os.getenv("MOCKINTERVIEW_LOG_FILE") or LOG_FILE,
        log_level=(os.getenv("MOCKINTERVIEW_LOG_LEVEL") or LOG_LEVEL).upper(),
    )
