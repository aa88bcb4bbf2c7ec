import logging
import os
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


# ── column widths ─────────────────────────────────────────────────────────────
_W_SERIAL  = 6
_W_DATE    = 12
_W_TIME    = 10
_W_LEVEL   = 8
_W_TRIAL   = 36
_W_IP      = 16
_W_MODULE  = 25
_W_EVENT   = 40
_SEP       = " | "
_TOTAL_WIDTH = (
    _W_SERIAL + _W_DATE + _W_TIME + _W_LEVEL
    + _W_TRIAL + _W_IP + _W_MODULE + _W_EVENT
    + len(_SEP) * 7
)


class StructuredFileHandler(logging.FileHandler):
    """File handler that writes logs as fixed-width, human-readable columns.

    Column layout:
        Serial | Date | Time | Level | Trial ID | Client IP | Module/Function | Event
    """

    def __init__(self, log_file_path: str):
        super().__init__(log_file_path, mode="a", encoding="utf-8")
        self.log_counter = self._get_next_serial_number()
        self._ensure_header_exists()

    # ── helpers ───────────────────────────────────────────────────────────────

    def _get_next_serial_number(self) -> int:
        try:
            if os.path.exists(self.baseFilename) and os.path.getsize(self.baseFilename) > 0:
                with open(self.baseFilename, "r", encoding="utf-8") as f:
                    for line in reversed(f.readlines()):
                        parts = line.split(_SEP)
                        if parts and parts[0].strip().isdigit():
                            return int(parts[0].strip()) + 1
            return 1
        except OSError:
            return 1

    def _ensure_header_exists(self):
        try:
            if not os.path.exists(self.baseFilename) or os.path.getsize(self.baseFilename) == 0:
                with open(self.baseFilename, "w", encoding="utf-8") as f:
                    f.write("=" * _TOTAL_WIDTH + "\n")
                    f.write(f"{'STYLESNAP - TRIAL & ENTITLEMENT LOG':^{_TOTAL_WIDTH}}\n")
                    f.write("=" * _TOTAL_WIDTH + "\n")
                    header = (
                        f"{'#':<{_W_SERIAL}}"
                        f"{_SEP}{'Date':<{_W_DATE}}"
                        f"{_SEP}{'Time':<{_W_TIME}}"
                        f"{_SEP}{'Level':<{_W_LEVEL}}"
                        f"{_SEP}{'Trial ID':<{_W_TRIAL}}"
                        f"{_SEP}{'Client IP':<{_W_IP}}"
                        f"{_SEP}{'Module/Function':<{_W_MODULE}}"
                        f"{_SEP}{'Event':<{_W_EVENT}}"
                    )
                    f.write(header + "\n")
                    f.write("-" * _TOTAL_WIDTH + "\n")
        except OSError:
            pass

    # ── emit ──────────────────────────────────────────────────────────────────

    def emit(self, record: logging.LogRecord):
        try:
            dt = datetime.fromtimestamp(record.created)
            module_func = f"{record.module}.{record.funcName}"

            # Trial context (set via extra={} on the logger call, or "-" if absent)
            trial_id  = str(getattr(record, "trial_id",  "-") or "-")
            client_ip = str(getattr(record, "client_ip", "-") or "-")

            full_msg = record.getMessage()
            message_preview = full_msg
            if len(message_preview) > _W_EVENT:
                message_preview = message_preview[:_W_EVENT - 3] + "..."

            line = (
                f"{self.log_counter:<{_W_SERIAL}}"
                f"{_SEP}{dt.strftime('%Y-%m-%d'):<{_W_DATE}}"
                f"{_SEP}{dt.strftime('%H:%M:%S'):<{_W_TIME}}"
                f"{_SEP}{record.levelname:<{_W_LEVEL}}"
                f"{_SEP}{trial_id:<{_W_TRIAL}}"
                f"{_SEP}{client_ip:<{_W_IP}}"
                f"{_SEP}{module_func:<{_W_MODULE}}"
                f"{_SEP}{message_preview:<{_W_EVENT}}"
            )

            indent = " " * (_W_SERIAL + len(_SEP))
            with open(self.baseFilename, "a", encoding="utf-8") as f:
                f.write(line + "\n")

                # Full message on the next line for errors/warnings
                if record.levelno >= logging.WARNING:
                    if len(full_msg) > _W_EVENT:
                        f.write(f"{indent}Details: {full_msg}\n")
                    if record.exc_info:
                        tb = "".join(traceback.format_exception(*record.exc_info))
                        f.write(f"{indent}Exception: {tb}\n")

                if record.levelno >= logging.ERROR:
                    f.write("-" * _TOTAL_WIDTH + "\n")

            self.log_counter += 1
        except Exception:
            self.handleError(record)


# ── setup ─────────────────────────────────────────────────────────────────────

def setup_file_logging(log_level: int = logging.WARNING, log_file: Optional[str] = None) -> logging.Logger:
    """Configure structured file + console logging.

    File handler records WARNING and above (to reduce noise).
    Console handler uses *log_level*.
    """
    if log_file:
        log_file_path = Path(log_file)
    else:
        log_file_path = Path(__file__).parent.parent / "logs" / "logs.txt"
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = StructuredFileHandler(str(log_file_path))
    file_handler.setLevel(logging.WARNING)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)

    file_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
    )

    logging.basicConfig(level=log_level, handlers=[file_handler, console_handler], force=True)

    logger = logging.getLogger(__name__)
    logger.warning("StyleSnap SESSION STARTED at %s", datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC"))
    return logger


# ── helpers for callers ───────────────────────────────────────────────────────

def log_trial_event(
    event: str,
    trial_id: Optional[str] = None,
    client_ip: Optional[str] = None,
    error: Optional[str] = None,
):
    """Log a trial lifecycle event (seeded, registered, discarded)."""
    _log = logging.getLogger("trial_events")
    extra = {"trial_id": trial_id or "-", "client_ip": client_ip or "-"}

    if error:
        _log.error("TRIAL %s FAILED: %s", event, error, extra=extra)
        return
    _log.info("TRIAL %s", event, extra=extra)


def log_generation(
    trial_id: str,
    entitlement: str,
    duration: float,
    error: Optional[str] = None,
):
    """Log a generation attempt. Failures and slow calls reach the file."""
    _log = logging.getLogger("generation")
    extra = {"trial_id": trial_id, "client_ip": "-"}

    if error:
        _log.error(
            "GENERATION FAILED (%s) after %.2fs: %s",
            entitlement, duration, error,
            extra=extra,
        )
        return

    if duration > 30.0:
        _log.warning("SLOW GENERATION (%s): %.2fs", entitlement, duration, extra=extra)
    else:
        _log.info("GENERATION OK (%s): %.2fs", entitlement, duration, extra=extra)


def log_payment_event(
    event: str,
    order_id: str,
    trial_id: Optional[str] = None,
    error: Optional[str] = None,
    critical: bool = False,
):
    """Log a payment step. Every payment event is kept in the file."""
    _log = logging.getLogger("payments")
    extra = {"trial_id": trial_id or "-", "client_ip": "-"}

    if critical:
        _log.critical("PAYMENT %s order=%s: %s", event, order_id, error, extra=extra)
    elif error:
        _log.error("PAYMENT %s order=%s: %s", event, order_id, error, extra=extra)
    else:
        _log.warning("PAYMENT %s order=%s", event, order_id, extra=extra)
