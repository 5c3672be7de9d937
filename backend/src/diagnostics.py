"""Diagnostics — log files, fault tracebacks, crash reports.

Everything lands under ~/.pixelunsort:
    logs/pixelunsort.log        JSON lines, size-rotated
    logs/pixelunsort_fault.log  faulthandler output (native crashes in cv2/numpy)
    crash_reports/crash_*.json  uncaught exceptions, paths scrubbed

``-v`` additionally mirrors log records to stderr as plain text.
"""

import datetime
import faulthandler
import json
import logging
import logging.handlers
import os
import sys
import traceback
from pathlib import Path

from _version import __version__
from security import strip_pii

logger = logging.getLogger(__name__)

APP_DIR = "~/.pixelunsort"
LOG_FILE = "pixelunsort.log"
FAULT_FILE = "pixelunsort_fault.log"

MAX_CRASH_REPORTS = 5
MAX_LOG_AGE_DAYS = 7

LOG_MAX_BYTES = 10_000_000
LOG_BACKUPS = 7


def _validate_log_dir(env_dir: str) -> str:
    """Return env_dir if it resolves inside APP_DIR, else the default log dir."""
    app_dir = Path(os.path.expanduser(APP_DIR)).resolve()
    default = os.path.expanduser(f"{APP_DIR}/logs")
    if not env_dir:
        return default
    candidate = Path(env_dir).resolve()
    if candidate == app_dir or app_dir in candidate.parents:
        return str(candidate)
    logger.warning("Ignoring PIXELUNSORT_LOG_DIR %s: not under %s", env_dir, APP_DIR)
    return default


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        created = datetime.datetime.fromtimestamp(record.created, tz=datetime.timezone.utc)
        entry = {
            "timestamp": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        exc = record.exc_info[1] if record.exc_info else None
        if exc is not None:
            entry["exception"] = {
                "type": type(exc).__name__,
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(entry)


def _prune(directory: str, pattern: str, keep: int | None = None, max_age_days: int | None = None):
    """Remove files matching pattern beyond the newest `keep`, or older than max_age_days."""
    try:
        files = sorted(
            Path(directory).glob(pattern), key=lambda p: p.stat().st_mtime, reverse=True
        )
        doomed = files[keep:] if keep is not None else []
        if max_age_days is not None:
            cutoff = (
                datetime.datetime.now() - datetime.timedelta(days=max_age_days)
            ).timestamp()
            doomed += [p for p in files if p.stat().st_mtime < cutoff and p not in doomed]
        for path in doomed:
            path.unlink(missing_ok=True)
    except OSError as e:
        logger.debug("Pruning %s/%s skipped: %s", directory, pattern, e)


def setup_structured_logging(log_dir: str | None = None) -> str:
    """Attach the rotating JSON log to the root logger.

    The directory comes from ``log_dir`` or PIXELUNSORT_LOG_DIR and must sit
    under ~/.pixelunsort; the level from PIXELUNSORT_LOG_LEVEL (default INFO).
    Returns the directory actually used.
    """
    resolved_dir = _validate_log_dir(log_dir or os.environ.get("PIXELUNSORT_LOG_DIR", ""))
    os.makedirs(resolved_dir, mode=0o700, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        os.path.join(resolved_dir, LOG_FILE),
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUPS,
    )
    handler.setFormatter(JSONFormatter())

    level = logging.getLevelName(os.environ.get("PIXELUNSORT_LOG_LEVEL", "INFO").upper())
    root = logging.getLogger()
    root.setLevel(level if isinstance(level, int) else logging.INFO)
    root.addHandler(handler)

    _prune(resolved_dir, f"{LOG_FILE}*", max_age_days=MAX_LOG_AGE_DAYS)
    return resolved_dir


def setup_console_logging(level: int = logging.DEBUG) -> logging.Handler:
    """Mirror log records to stderr in plain text."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-7s %(name)s: %(message)s")
    )
    root = logging.getLogger()
    root.addHandler(handler)
    if root.level > level or root.level == logging.NOTSET:
        root.setLevel(level)
    return handler


def setup_faulthandler(log_dir: str):
    # faulthandler keeps the raw fd, so it cannot share the rotating log file.
    fault_path = os.path.join(log_dir, FAULT_FILE)
    try:
        fault_file = open(fault_path, "a", buffering=1)  # noqa: SIM115
        os.chmod(fault_path, 0o600)
        faulthandler.enable(file=fault_file, all_threads=True)
    except OSError as e:
        print(f"WARNING: faulthandler disabled ({e})", file=sys.stderr)


def _crash_dir() -> str:
    return os.path.expanduser(f"{APP_DIR}/crash_reports")


def _crash_report(exc_type, exc_value, exc_tb, stamp: str) -> dict:
    report = {
        "timestamp": stamp,
        "version": __version__,
        "exception_type": exc_type.__name__ if exc_type else "Unknown",
        "exception_message": str(exc_value),
        "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
        "argv": sys.argv[1:],
        "python_version": sys.version,
        "platform": sys.platform,
    }
    return strip_pii({"extra": report}, {})["extra"]


def _write_private_json(path: str, data: dict):
    old_umask = os.umask(0o077)
    try:
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    finally:
        os.umask(old_umask)


def setup_excepthook():
    """Route uncaught exceptions through a crash report, then the default hook."""

    def _crash_excepthook(exc_type, exc_value, exc_tb):
        try:
            crash_dir = _crash_dir()
            os.makedirs(crash_dir, mode=0o700, exist_ok=True)
            stamp = datetime.datetime.now(tz=datetime.timezone.utc).strftime("%Y%m%dT%H%M%SZ")
            _write_private_json(
                os.path.join(crash_dir, f"crash_{stamp}.json"),
                _crash_report(exc_type, exc_value, exc_tb, stamp),
            )
            _prune(crash_dir, "crash_*.json", keep=MAX_CRASH_REPORTS)
        except Exception as e:  # noqa: BLE001
            print(f"WARNING: crash report not written ({e})", file=sys.stderr)

        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _crash_excepthook


def init_diagnostics(verbose: bool = False) -> str:
    log_dir = setup_structured_logging()
    if verbose:
        setup_console_logging()
    setup_faulthandler(log_dir)
    setup_excepthook()
    logger.info("Diagnostics ready (logs in %s)", log_dir)
    return log_dir
