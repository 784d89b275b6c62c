"""Application configuration.

Constants hold the defaults; ``load_settings()`` overlays ``RMS_*``
environment variables on top of them.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from rms.domain.exceptions import ValidationError

APP_NAME = "rms"
DATA_DIRNAME = ".rms"
DB_FILENAME = "rms.db"
LOG_FILENAME = "rms.log"
LOG_MAX_BYTES = 1_000_000
LOG_BACKUP_COUNT = 3
LOCK_TIMEOUT_SECONDS = 5.0
LATE_FEE_PER_DAY = Decimal("50.00")
LATE_FEE_GRACE_DAYS = 0
LIMITED_THRESHOLD = 1.0
RETRY_ATTEMPTS = 3
RETRY_BASE_DELAY = 0.05


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the reservation engine."""

    data_dir: Path
    db_filename: str = DB_FILENAME
    lock_timeout: float = LOCK_TIMEOUT_SECONDS
    late_fee_per_day: Decimal = LATE_FEE_PER_DAY
    late_fee_grace_days: int = LATE_FEE_GRACE_DAYS
    late_fee_max_ratio: Decimal | None = None
    late_fee_daily_ratio: Decimal | None = None
    limited_threshold: float = LIMITED_THRESHOLD
    retry_attempts: int = RETRY_ATTEMPTS
    retry_base_delay: float = RETRY_BASE_DELAY
    log_level: str = "INFO"

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_filename

    @property
    def log_path(self) -> Path:
        return self.data_dir / LOG_FILENAME


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from the environment, falling back to the defaults."""
    env = os.environ if environ is None else environ

    data_dir = env.get("RMS_DATA_DIR")
    max_ratio = env.get("RMS_LATE_FEE_MAX_RATIO")
    daily_ratio = env.get("RMS_LATE_FEE_DAILY_RATIO")
    return Settings(
        data_dir=Path(data_dir) if data_dir else Path.home() / DATA_DIRNAME,
        db_filename=env.get("RMS_DB_FILENAME", DB_FILENAME),
        lock_timeout=_parse(env, "RMS_LOCK_TIMEOUT", float, LOCK_TIMEOUT_SECONDS),
        late_fee_per_day=_parse(env, "RMS_LATE_FEE_PER_DAY", Decimal, LATE_FEE_PER_DAY),
        late_fee_grace_days=_parse(env, "RMS_LATE_FEE_GRACE_DAYS", int, LATE_FEE_GRACE_DAYS),
        late_fee_max_ratio=_parse(env, "RMS_LATE_FEE_MAX_RATIO", Decimal, None) if max_ratio else None,
        late_fee_daily_ratio=_parse(env, "RMS_LATE_FEE_DAILY_RATIO", Decimal, None) if daily_ratio else None,
        limited_threshold=_parse(env, "RMS_LIMITED_THRESHOLD", float, LIMITED_THRESHOLD),
        retry_attempts=_parse(env, "RMS_RETRY_ATTEMPTS", int, RETRY_ATTEMPTS),
        retry_base_delay=_parse(env, "RMS_RETRY_BASE_DELAY", float, RETRY_BASE_DELAY),
        log_level=env.get("RMS_LOG_LEVEL", "INFO").upper(),
    )


def _parse(env: Mapping[str, str], key: str, cast, default):
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except (ValueError, InvalidOperation) as exc:
        raise ValidationError(f"Invalid value for {key}: {raw!r}") from exc
