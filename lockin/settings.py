"""Engine settings with JSON persistence.

Settings are stored at:
    ~/.lockin/settings.json

Usage::

    settings = load_settings()
    settings.max_settle_passes = 8
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path.home() / ".lockin"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"
DB_PATH = APP_SUPPORT_DIR / "lockin.db"

MAX_DELETE_BATCH = 500   # store limit on operations per batch

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class Settings:
    """All tunable engine knobs."""

    # ── storage ───────────────────────────────────────────────────────
    database_url: str = f"sqlite:///{DB_PATH}"
    delete_batch_size: int = MAX_DELETE_BATCH

    # ── rewards ───────────────────────────────────────────────────────
    xp_per_minute: int = 2
    max_settle_passes: int = 5      # badge cascade bound

    # ── logging ───────────────────────────────────────────────────────
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.delete_batch_size = max(1, min(self.delete_batch_size, MAX_DELETE_BATCH))
        self.max_settle_passes = max(1, self.max_settle_passes)
        if not isinstance(self.log_level, str):
            self.log_level = "INFO"


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    try:
        if SETTINGS_PATH.exists():
            data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered)
    except (OSError, ValueError, TypeError) as exc:
        logger.warning(f"Ignoring unreadable settings file {SETTINGS_PATH}: {exc}")
    return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )


def configure_logging(level: str | None = None) -> None:
    """Install the root log format; *level* defaults to the saved setting."""
    if level is None:
        level = load_settings().log_level
    numeric = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(format=LOG_FORMAT, level=numeric)
