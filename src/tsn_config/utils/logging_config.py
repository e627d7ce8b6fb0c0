"""Logging setup for tsnconf.

Everything under the ``tsn_config`` logger goes to the console at the
configured level and to a rotating file at DEBUG. Per-target push timings
go to ``tsn_config.perf``, which writes to its own file so that a run can be
profiled without wading through RPC chatter.

Environment Variables:
    TSNCONF_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    TSNCONF_LOG_FILE: Path to log file (default: ~/.tsn-config/tsn-config.log)
    TSNCONF_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    TSNCONF_LOG_BACKUPS: Number of backup files to keep (default: 5)
"""
import logging
import os
import time
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

perf_logger = logging.getLogger("tsn_config.perf")

PERF_FILE_NAME = "tsn-config-perf.log"

LINE_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"
PERF_FORMAT = "%(asctime)s.%(msecs)03d %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def get_log_level() -> int:
    name = os.environ.get("TSNCONF_LOG_LEVEL", "INFO").upper()
    return getattr(logging, name, logging.INFO)


def get_log_file() -> Path:
    default = Path.home() / ".tsn-config" / "tsn-config.log"
    return Path(os.environ.get("TSNCONF_LOG_FILE") or default)


def _rotating_handler(path: Path, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=int(os.environ.get("TSNCONF_LOG_MAX_SIZE", "10")) * 1024 * 1024,
        backupCount=int(os.environ.get("TSNCONF_LOG_BACKUPS", "5")),
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    return handler


def setup_logging(level: Optional[int] = None, log_file: Optional[Path] = None) -> None:
    """Attach console, file and perf handlers once per process.

    Args:
        level: Console level; TSNCONF_LOG_LEVEL when omitted
        log_file: Main log file; TSNCONF_LOG_FILE when omitted
    """
    global _configured
    if _configured:
        return

    console_level = level if level is not None else get_log_level()
    log_file = Path(log_file) if log_file else get_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    perf_file = log_file.parent / PERF_FILE_NAME

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(LINE_FORMAT, datefmt=DATE_FORMAT))

    package_logger = logging.getLogger("tsn_config")
    package_logger.setLevel(logging.DEBUG)
    package_logger.addHandler(console)
    package_logger.addHandler(_rotating_handler(log_file, LINE_FORMAT))

    perf_logger.setLevel(logging.DEBUG)
    perf_logger.propagate = False
    perf_logger.addHandler(_rotating_handler(perf_file, PERF_FORMAT))

    # One INFO line per RPC otherwise
    logging.getLogger("ncclient").setLevel(logging.WARNING)

    _configured = True
    package_logger.debug(
        f"Logging to {log_file} (console {logging.getLevelName(console_level)}), perf to {perf_file}"
    )


@contextmanager
def timed_section_sync(operation: str, device_id: Optional[str] = None, **extra):
    """Log the wall time of a block to the perf logger.

    Failures are logged at WARNING with the exception text and re-raised.

    Usage:
        with timed_section_sync("push", device_id="bridge-1/sw0p3", protocol="netconf"):
            backend.map_and_push(intent, model, target)
    """
    context = "".join(f" {k}={v}" for k, v in extra.items())
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        perf_logger.warning(f"{operation} {device_id or '-'} {elapsed:.2f}ms FAIL{context} error={e}")
        raise
    elapsed = (time.perf_counter() - start) * 1000
    perf_logger.info(f"{operation} {device_id or '-'} {elapsed:.2f}ms OK{context}")
