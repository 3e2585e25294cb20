"""Rate-limited progress logging for header synchronisation."""

import threading
from datetime import datetime, timedelta, timezone
from typing import Any

_LOG_INTERVAL = timedelta(seconds=10)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _aware(when: datetime) -> datetime:
    return when if when.tzinfo is not None else when.astimezone(timezone.utc)


def _format_duration(millis: int) -> str:
    """Render a millisecond count the way durations are shown in the log."""
    if millis == 0:
        return "0s"
    hours, rest = divmod(millis, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    seconds, frac = divmod(rest, 1000)
    sec = str(seconds)
    if frac:
        sec += f".{frac:03d}".rstrip("0")
    if hours:
        return f"{hours}h{minutes}m{sec}s"
    if minutes:
        return f"{minutes}m{sec}s"
    return f"{sec}s"


class HeaderProgressLogger:
    """Logs how many entities were processed, at most once every 10 seconds."""

    def __init__(self, progress_action: str, entity_type: str, logger: Any) -> None:
        self.progress_action = progress_action
        self.entity_type = entity_type
        self.logger = logger
        self._received = 0
        self._last_log_time = _now()
        self._lock = threading.Lock()

    def log_block_height(self, timestamp: Any, height: int) -> None:
        """Count one processed entity and log progress if the interval elapsed."""
        with self._lock:
            self._received += 1

            now = _now()
            elapsed = now - self._last_log_time
            if elapsed < _LOG_INTERVAL:
                return

            millis = elapsed // timedelta(milliseconds=1)
            duration = _format_duration(millis // 10 * 10)

            entity = self.entity_type
            if self._received > 1:
                entity += "s"
            self.logger.info(
                "%s %d %s in the last %s (height %d, %s)",
                self.progress_action,
                self._received,
                entity,
                duration,
                height,
                timestamp,
            )

            self._received = 0
            self._last_log_time = now

    def set_last_log_time(self, when: datetime) -> None:
        """Set the moment the last progress message was written."""
        with self._lock:
            self._last_log_time = _aware(when)