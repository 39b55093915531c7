"""
Logging utilities for the session client.
"""
import os
import logging

# Third-party loggers that flood DEBUG with connection chatter
_NOISY_LOGGERS = ("urllib3", "google.auth", "grpc")


def setup_logging(log_file_path: str, level: str = "DEBUG") -> str:
    """
    Send everything to an appending log file; the console only gets CRITICAL.

    The terminal belongs to the interactive prompt, so session diagnostics
    live in the file.

    Args:
        log_file_path: Full path to the log file; parent directories are created
        level: Level name for the file handler

    Returns:
        Path to the log file
    """
    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)

    to_file = logging.FileHandler(log_file_path, mode='a')
    to_file.setLevel(getattr(logging, level.upper(), logging.DEBUG))
    to_file.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s - %(message)s'))
    root.addHandler(to_file)

    to_console = logging.StreamHandler()
    to_console.setLevel(logging.CRITICAL)
    to_console.setFormatter(logging.Formatter('%(message)s'))
    root.addHandler(to_console)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file_path
