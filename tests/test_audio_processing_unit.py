import numpy as np

from mockinterview.infrastructure.audio.processing import (
    MicrophoneStream, pcm16_to_float, prepare_chunk, resample, stereo_to_mono, to_pcm16_bytes,
)


def _pcm(values) -> bytes:
    return np.array(values, dtype=np.int16).tobytes()


def test_pcm16_to_float_scales_and_shapes() -> None:
    frames = pcm16_to_float(_pcm([0, 16384, -32768, 32767]), channels=2)
    assert frames.shape == (2, 2)
    assert frames[0, 1] == 0.5
    assert frames[1, 0] == -1.0


def test_stereo_to_mono_averages_channels() -> None:
    mono = stereo_to_mono(np.array([[0.2, 0.4], [-1.0, 1.0]], dtype=np.float32))
    assert np.allclose(mono, [0.3, 0.0])


def test_resample_changes_length_by_rate_ratio() -> None:
    audio = np.zeros(4800, dtype=np.float32)
    assert resample(audio, 48000, 16000).shape == (1600,)
    assert resample(audio, 16000, 16000).shape == (4800,)


def test_to_pcm16_bytes_clips() -> None:
    out = np.frombuffer(to_pcm16_bytes(np.array([2.0, -2.0, 0.0], dtype=np.float32)), dtype=np.int16)
    assert list(out) == [32767, -32768, 0]


def test_prepare_chunk_outputs_mono_at_target_rate() -> None:
    stereo = _pcm([1000, 1000] * 4800)
    out = prepare_chunk(stereo, channels=2, rate_in=48000, rate_out=16000)
    assert len(out) == 1600 * 2


def test_generator_drains_buffer_until_sentinel() -> None:
    mic = MicrophoneStream(sr_capture=16000, sr_target=16000)
    mic.closed = False
    mic._buff.put(_pcm([1000, 2000]))
    mic._buff.put(_pcm([3000]))
    mic._buff.put(None)

    chunks = list(mic.generator())

    assert len(chunks) == 1
    assert np.allclose(np.frombuffer(chunks[0], dtype=np.int16), [1000, 2000, 3000], atol=1)
    assert mic.closed is True
