"""
Basic audio processing for streaming recognition: PCM conversions and resampling.
"""
from math import gcd

import numpy as np
from scipy.signal import resample_poly


def pcm16_to_float(raw: bytes, channels: int = 1) -> np.ndarray:
    """Interleaved int16 bytes -> float32 array shaped (frames, channels)."""
    samples = np.frombuffer(raw, dtype=np.int16).astype(np.float32) / 32768.0
    usable = len(samples) - (len(samples) % channels)
    return samples[:usable].reshape(-1, channels)


def stereo_to_mono(x: np.ndarray) -> np.ndarray:
    """Convert multi-channel audio to mono by averaging channels."""
    return np.mean(x, axis=1)


def resample(mono: np.ndarray, rate_in: int, rate_out: int) -> np.ndarray:
    """Polyphase resample between integer sample rates."""
    if rate_in == rate_out or mono.size == 0:
        return mono.astype(np.float32)
    g = gcd(rate_in, rate_out)
    return resample_poly(mono, up=rate_out // g, down=rate_in // g).astype(np.float32)


def to_pcm16_bytes(audio: np.ndarray, gain: float = 1.0) -> bytes:
    """Float audio in [-1, 1] -> little-endian LINEAR16 bytes."""
    return np.clip(audio * gain * 32767, -32768, 32767).astype(np.int16).tobytes()


def prepare_chunk(raw: bytes, channels: int, rate_in: int, rate_out: int, gain: float = 1.0) -> bytes:
    """Raw microphone bytes -> mono LINEAR16 at the recognizer's rate."""
    frames = pcm16_to_float(raw, channels)
    mono = stereo_to_mono(frames) if channels > 1 else frames.flatten()
    return to_pcm16_bytes(resample(mono, rate_in, rate_out), gain)
