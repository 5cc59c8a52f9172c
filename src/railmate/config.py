"""Runtime settings for railmate."""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

# Seconds the tracking animator waits between route points
DEFAULT_TRACKING_INTERVAL = 2.0

# Alert delay multiplier. 60 treats "minutes before" as real minutes;
# 1 replays the demo behaviour where the number is used as seconds.
DEFAULT_SECONDS_PER_MINUTE = 60.0

# Countdown display granularity for an active alert
DEFAULT_COUNTDOWN_TICK = 1.0

# Simulated lookup latency used by the demo
DEFAULT_SEARCH_DELAY = 1.0

DEFAULT_STORAGE_PATH = os.path.join(os.path.expanduser("~"), ".railmate", "storage.json")

ENV_PREFIX = "RAILMATE_"

# Periods that reschedule themselves; zero would never let the clock advance
POSITIVE_SETTINGS = ("tracking_interval", "countdown_tick")


@dataclass
class Settings:
    """Tunable values shared by the railmate components."""
    tracking_interval: float = DEFAULT_TRACKING_INTERVAL
    seconds_per_minute: float = DEFAULT_SECONDS_PER_MINUTE
    countdown_tick: float = DEFAULT_COUNTDOWN_TICK
    search_delay: float = DEFAULT_SEARCH_DELAY
    storage_path: Optional[str] = field(default=DEFAULT_STORAGE_PATH)

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """
        Build settings from RAILMATE_* environment variables.

        Unparseable numbers are logged and the default is kept. An empty
        RAILMATE_STORAGE_PATH selects in-memory storage.
        """
        environ = os.environ if environ is None else environ
        settings = cls()

        for name in ("tracking_interval", "seconds_per_minute", "countdown_tick", "search_delay"):
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is None:
                continue
            try:
                value = float(raw)
            except ValueError:
                logger.warning(f"Ignoring invalid {ENV_PREFIX}{name.upper()}={raw!r}")
                continue
            if value < 0 or (value == 0 and name in POSITIVE_SETTINGS):
                logger.warning(f"Ignoring out of range {ENV_PREFIX}{name.upper()}={raw!r}")
                continue
            setattr(settings, name, value)

        if ENV_PREFIX + "STORAGE_PATH" in environ:
            settings.storage_path = environ[ENV_PREFIX + "STORAGE_PATH"] or None

        return settings

    @classmethod
    def demo(cls) -> "Settings":
        """Demo settings: alerts count seconds and storage stays in memory."""
        return cls(seconds_per_minute=1.0, storage_path=None)
