"""Unit tests for settings loading and logging setup."""

import logging
import sys
from decimal import Decimal
from pathlib import Path

import pytest

from rms.config import LATE_FEE_PER_DAY, Settings, load_settings
from rms.domain.exceptions import ValidationError
from rms.logging_config import configure_logging


class TestLoadSettings:

    def test_defaults(self):
        settings = load_settings({})
        assert settings.data_dir == Path.home() / ".rms"
        assert settings.late_fee_per_day == LATE_FEE_PER_DAY
        assert settings.late_fee_max_ratio is None
        assert settings.late_fee_daily_ratio is None
        assert settings.db_path.name == "rms.db"

    def test_environment_overrides(self, tmp_path):
        settings = load_settings(
            {
                "RMS_DATA_DIR": str(tmp_path),
                "RMS_LATE_FEE_PER_DAY": "35.00",
                "RMS_LATE_FEE_GRACE_DAYS": "1",
                "RMS_LATE_FEE_MAX_RATIO": "0.5",
                "RMS_LATE_FEE_DAILY_RATIO": "0.05",
                "RMS_LIMITED_THRESHOLD": "0.25",
                "RMS_LOCK_TIMEOUT": "2.5",
                "RMS_LOG_LEVEL": "debug",
            }
        )
        assert settings.db_path == tmp_path / "rms.db"
        assert settings.late_fee_per_day == Decimal("35.00")
        assert settings.late_fee_grace_days == 1
        assert settings.late_fee_max_ratio == Decimal("0.5")
        assert settings.late_fee_daily_ratio == Decimal("0.05")
        assert settings.limited_threshold == 0.25
        assert settings.lock_timeout == 2.5
        assert settings.log_level == "DEBUG"

    def test_invalid_value_rejected(self):
        with pytest.raises(ValidationError, match="RMS_RETRY_ATTEMPTS"):
            load_settings({"RMS_RETRY_ATTEMPTS": "many"})


class TestConfigureLogging:

    def test_writes_to_rotating_file_in_data_dir(self, tmp_path):
        root = logging.getLogger()
        saved = root.handlers[:], root.level, sys.excepthook
        try:
            configure_logging(Settings(data_dir=tmp_path))
            logging.getLogger("rms.test").info("hello ledger")
            for handler in root.handlers:
                handler.flush()
            assert "hello ledger" in (tmp_path / "rms.log").read_text(encoding="utf-8")
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers[:] = saved[0]
            root.setLevel(saved[1])
            sys.excepthook = saved[2]
