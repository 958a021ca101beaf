"""
Tests for the GUI-facing operations and process startup.
"""

import logging

import pytest

from pocketledger import add_transaction, get_transactions
from pocketledger.db import (
    ConstraintViolation,
    Transaction,
    get_repository,
    reset_repository,
    set_repository,
)
from pocketledger.runner import start


class TestCommands:
    """Tests for get_transactions and add_transaction."""

    def test_add_from_gui_payload(self, ledger, seeded) -> None:
        """Test that a GUI mapping gets its defaults and is stored."""
        payload = {
            "category_id": seeded["category"],
            "from_account_id": seeded["checking"],
            "type": "expense",
            "amount": 1550,
            "transaction_date": "2026-03-14T09:30:00+00:00",
            "description": "Weekly shop",
        }

        stored = add_transaction(payload, repository=ledger)

        assert stored.id is not None
        assert stored.status.value == "completed"
        assert stored.method.value == "other"
        assert stored.amount.scale == 2
        assert stored.amount.currency == "EUR"
        assert (stored.color, stored.icon) == ("#000000", "mdi:bank")
        assert get_transactions(repository=ledger) == [stored]
        assert get_transactions(repository=ledger)[0].amount.format() == "15.50"

    def test_add_transaction_value(self, ledger, make_transaction) -> None:
        """Test that a Transaction value is stored and returned with its id."""
        stored = add_transaction(make_transaction(), repository=ledger)
        assert isinstance(stored, Transaction)
        assert get_transactions(repository=ledger) == [stored]

    def test_violation_reaches_caller(self, ledger, seeded) -> None:
        """Test that a rejected write is an error, not an empty success."""
        payload = {
            "category_id": seeded["category"],
            "from_account_id": seeded["checking"],
            "type": "transfer",
            "amount": 100,
        }
        with pytest.raises(ConstraintViolation):
            add_transaction(payload, repository=ledger)
        assert get_transactions(repository=ledger) == []

    def test_bad_payload(self, ledger) -> None:
        """Test that an unknown type in a payload is rejected."""
        with pytest.raises(ValueError):
            add_transaction(
                {"category_id": 1, "type": "gift", "amount": 1}, repository=ledger
            )

    def test_process_wide_repository(self, ledger, make_transaction) -> None:
        """Test that the commands default to the installed ledger."""
        set_repository(ledger)
        stored = add_transaction(make_transaction())
        assert get_transactions() == [stored]
        assert get_repository() is ledger

    def test_payload_round_trip(self, make_transaction) -> None:
        """Test that to_dict output is accepted by from_dict."""
        transaction = make_transaction(tags="a,b")
        assert Transaction.from_dict(transaction.to_dict()) == transaction

    def test_payload_carries_gui_field_names(self, make_transaction) -> None:
        """Test that to_dict also emits the front-end's _type and note keys."""
        payload = make_transaction(notes="split with Sam").to_dict()
        assert payload["_type"] == payload["type"] == "expense"
        assert payload["note"] == payload["notes"] == "split with Sam"

    def test_payload_with_zulu_dates(self, seeded) -> None:
        """Test that ISO dates ending in Z are accepted."""
        transaction = Transaction.from_dict(
            {
                "category_id": seeded["category"],
                "from_account_id": seeded["checking"],
                "_type": "income",
                "amount": 500,
                "date": "2026-03-14T09:30:00Z",
            }
        )
        assert transaction.date.utcoffset().total_seconds() == 0
        assert transaction.transaction_date == transaction.date


class TestStartup:
    """Tests for opening the process-wide ledger."""

    @pytest.fixture(autouse=True)
    def _restore_logging(self):
        """Drop the handlers start() installs on the root logger."""
        root = logging.getLogger()
        before = list(root.handlers)
        yield
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()

    def test_start_opens_configured_path(self, tmp_path, monkeypatch) -> None:
        """Test that start() migrates the database named by the environment."""
        monkeypatch.chdir(tmp_path)
        db_path = tmp_path / "custom" / "ledger.db"
        monkeypatch.setenv("POCKETLEDGER_DB_PATH", str(db_path))

        repository = start()

        assert db_path.exists()
        assert repository is get_repository()
        assert repository.list_transactions() == []
        reset_repository()

    def test_start_exits_when_store_cannot_open(self, tmp_path, monkeypatch) -> None:
        """Test that an unusable database file stops the process."""
        monkeypatch.chdir(tmp_path)
        not_a_db = tmp_path / "garbage.db"
        not_a_db.write_text("this is not sqlite " * 50)
        monkeypatch.setenv("POCKETLEDGER_DB_PATH", str(not_a_db))

        with pytest.raises(SystemExit) as exc_info:
            start()

        assert exc_info.value.code == 1

    def test_start_reads_dotenv(self, tmp_path, monkeypatch) -> None:
        """Test that a .env file in the working directory sets the database path."""
        monkeypatch.chdir(tmp_path)
        # setenv then delenv so teardown removes whatever load_dotenv sets
        monkeypatch.setenv("POCKETLEDGER_DB_PATH", "unused")
        monkeypatch.delenv("POCKETLEDGER_DB_PATH")
        (tmp_path / ".env").write_text("POCKETLEDGER_DB_PATH=from-dotenv/ledger.db\n")

        start()

        assert (tmp_path / "from-dotenv" / "ledger.db").exists()
