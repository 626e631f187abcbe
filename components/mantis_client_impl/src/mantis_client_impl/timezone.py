"""Apply a MantisBT time zone to the running process."""

from __future__ import annotations

import logging
import os
import time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/Los_Angeles"


def is_valid_timezone(name: str | None) -> bool:
    if not name:
        return False
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return False
    return True


class TimezoneApplier:
    """Sets the process-wide time zone (the TZ environment variable).

    This changes state shared by every thread of the process. Inject a
    subclass overriding _set_process_timezone() where that is not wanted.
    """

    def __init__(self, fallback: str = DEFAULT_TIMEZONE) -> None:
        self._fallback = fallback

    def apply(self, name: str | None) -> str:
        """Apply name, or the fallback zone if name is empty or unknown. Returns the applied zone."""
        zone = name
        if not is_valid_timezone(name):
            logger.warning("Unsupported time zone %r, using %s", name, self._fallback)
            zone = self._fallback
        self._set_process_timezone(zone)
        return zone

    def _set_process_timezone(self, zone: str) -> None:
        os.environ["TZ"] = zone
        #not available on Windows
        if hasattr(time, "tzset"):
            time.tzset()
