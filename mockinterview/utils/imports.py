"""
Quiet imports and native stderr suppression for PortAudio, ALSA and gRPC.
"""
import functools
import importlib
import os
from contextlib import contextmanager

# Native libraries read these when they load
_QUIET_ENV = {
    "JACK_NO_START_SERVER": "1",  # device enumeration must not spawn jackd
    "GRPC_VERBOSITY": "ERROR",
    "GLOG_minloglevel": "2",
}
for _name, _value in _QUIET_ENV.items():
    os.environ.setdefault(_name, _value)


@contextmanager
def silenced_stderr():
    """Point file descriptor 2 at /dev/null for the duration of the block."""
    try:
        saved = os.dup(2)
    except OSError:
        saved = None
    if saved is None:
        yield
        return

    devnull = os.open(os.devnull, os.O_WRONLY)
    try:
        os.dup2(devnull, 2)
        yield
    finally:
        os.dup2(saved, 2)
        os.close(devnull)
        os.close(saved)


def import_quietly(module_name: str):
    """Import a module whose native side prints banners while loading."""
    with silenced_stderr():
        return importlib.import_module(module_name)


def with_suppressed_audio_warnings(func):
    """Decorator form of :func:`silenced_stderr`."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with silenced_stderr():
            return func(*args, **kwargs)
    return wrapper
