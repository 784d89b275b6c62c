"""End-to-end tests for the click CLI against a temporary data directory."""

import logging
import sys

import pytest
from click.testing import CliRunner

from rms.infrastructure.cli.main import cli


@pytest.fixture
def invoke(tmp_path):
    root = logging.getLogger()
    saved = root.handlers[:], root.level, sys.excepthook
    runner = CliRunner()
    env = {"RMS_DATA_DIR": str(tmp_path), "RMS_RETRY_BASE_DELAY": "0"}

    def run(*args: str):
        return runner.invoke(cli, list(args), env=env)

    yield run

    for handler in root.handlers:
        handler.close()
    root.handlers[:] = saved[0]
    root.setLevel(saved[1])
    sys.excepthook = saved[2]


def _add_tent(invoke, quantity: str = "2"):
    result = invoke("product", "add", "--name", "Tent", "--quantity", quantity, "--rate", "20.00")
    assert result.exit_code == 0, result.output
    return result


class TestProductCommands:

    def test_add_and_list(self, invoke):
        result = _add_tent(invoke)
        assert "Product #1 'Tent' added: 2 units at $20.00/day" in result.output

        listing = invoke("product", "list")
        assert listing.exit_code == 0
        assert "Tent" in listing.output
        assert "$20.00" in listing.output

    def test_empty_catalog(self, invoke):
        result = invoke("product", "list")
        assert "No products found." in result.output

    def test_update_requires_a_change(self, invoke):
        _add_tent(invoke)
        result = invoke("product", "update", "--id", "1")
        assert result.exit_code != 0
        assert "Nothing to update" in result.output

    def test_set_stock(self, invoke):
        _add_tent(invoke)
        result = invoke("product", "set-stock", "--id", "1", "--quantity", "4", "--from", "2024-01-01")
        assert result.exit_code == 0, result.output
        assert "stock set to 4 from 2024-01-01" in result.output


class TestOrderCommands:

    def test_full_rental_flow(self, invoke):
        _add_tent(invoke)

        created = invoke(
            "order", "create", "--customer", "cust-1", "--items", "1:1",
            "--pickup", "2024-01-10", "--return", "2024-01-15",
        )
        assert created.exit_code == 0, created.output
        assert "Order #1 created  (status=confirmed)" in created.output
        assert "$120.00" in created.output

        started = invoke("order", "start", "--id", "1")
        assert started.exit_code == 0, started.output
        assert "return due 2024-01-15" in started.output

        completed = invoke("order", "complete", "--id", "1", "--returned-on", "2024-01-18")
        assert completed.exit_code == 0, completed.output
        assert "3 day(s) late at $50.00/day: late fee $150.00" in completed.output
        assert "$270.00" in completed.output

        shown = invoke("order", "show", "--id", "1")
        assert "status=completed" in shown.output

        billed = invoke("billing", "show", "--order", "1")
        assert billed.exit_code == 0, billed.output
        assert "$270.00" in billed.output

    def test_overbooking_is_reported(self, invoke):
        _add_tent(invoke, quantity="1")
        first = invoke(
            "order", "create", "--customer", "cust-1", "--items", "1:1",
            "--pickup", "2024-01-10", "--return", "2024-01-12",
        )
        assert first.exit_code == 0, first.output

        second = invoke(
            "order", "create", "--customer", "cust-2", "--items", "1:1",
            "--pickup", "2024-01-12", "--return", "2024-01-13",
        )

        assert second.exit_code == 1
        assert "Insufficient availability for product 1" in second.output
        assert "2024-01-12" in second.output

    def test_bad_date_rejected(self, invoke):
        _add_tent(invoke)
        result = invoke(
            "order", "create", "--customer", "cust-1", "--items", "1:1",
            "--pickup", "next tuesday", "--return", "2024-01-12",
        )
        assert result.exit_code == 2
        assert "is not an ISO date" in result.output

    def test_bad_item_format_rejected(self, invoke):
        _add_tent(invoke)
        result = invoke(
            "order", "create", "--customer", "cust-1", "--items", "tent",
            "--pickup", "2024-01-10", "--return", "2024-01-12",
        )
        assert result.exit_code != 0
        assert "Expected 'ProductID:Quantity'" in result.output

    def test_cancel_and_extend_errors(self, invoke):
        _add_tent(invoke)
        invoke(
            "order", "create", "--customer", "cust-1", "--items", "1:2",
            "--pickup", "2024-01-10", "--return", "2024-01-12",
        )

        extended = invoke("order", "extend", "--id", "1", "--until", "2024-01-13", "--charge", "40")
        assert extended.exit_code == 0, extended.output
        assert "return due 2024-01-13, total $160.00" in extended.output

        cancelled = invoke("order", "cancel", "--id", "1", "--reason", "rain")
        assert cancelled.exit_code == 0
        again = invoke("order", "cancel", "--id", "1")
        assert again.exit_code == 1
        assert "current status is cancelled" in again.output

    def test_unknown_order(self, invoke):
        result = invoke("order", "show", "--id", "9")
        assert result.exit_code == 1
        assert "Order #9 not found" in result.output


class TestAvailabilityCommands:

    def test_check_and_calendar(self, invoke):
        _add_tent(invoke)
        invoke(
            "order", "create", "--customer", "cust-1", "--items", "1:2",
            "--pickup", "2024-01-11", "--return", "2024-01-11",
        )

        check = invoke("availability", "check", "--product", "1", "--start", "2024-01-10", "--end", "2024-01-12")
        assert check.exit_code == 0, check.output
        assert "Not available" in check.output
        assert "Conflicts on: 2024-01-11" in check.output

        calendar = invoke("availability", "calendar", "--product", "1", "--start", "2024-01-10", "--end", "2024-01-12")
        lines = [line for line in calendar.output.splitlines() if line.startswith("2024-")]
        assert len(lines) == 3
        assert "fully_booked" in lines[1]


class TestBillingCommands:

    def test_pay(self, invoke):
        _add_tent(invoke)
        invoke(
            "order", "create", "--customer", "cust-1", "--items", "1:1",
            "--pickup", "2024-01-10", "--return", "2024-01-11",
        )

        paid = invoke("billing", "pay", "--order", "1", "--amount", "15.00")
        assert paid.exit_code == 0, paid.output
        assert "$25.00" in paid.output

        overpaid = invoke("billing", "pay", "--order", "1", "--amount", "100")
        assert overpaid.exit_code == 1
        assert "exceeds outstanding balance" in overpaid.output


class TestSettings:

    def test_invalid_setting_reported(self, invoke, monkeypatch):
        monkeypatch.setenv("RMS_LOCK_TIMEOUT", "soon")
        result = invoke("product", "list")
        assert result.exit_code == 1
        assert "RMS_LOCK_TIMEOUT" in result.output
