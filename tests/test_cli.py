"""Tests for the transactions command line."""

import json
import logging
from argparse import Namespace

import pytest

import cli.__main__ as cli_main
from cli.transactions import (
    cmd_check,
    cmd_show,
    cmd_sum,
    cmd_tree,
    cmd_types,
    execute_shell_command,
    exit_code_for,
    render_tree,
)
from logger import LOGGER_NAME
from services.result import ErrorKind
from tests.helpers import corrupt, put


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop handlers installed by setup_logging so they don't leak between tests."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()


@pytest.fixture
def tree(services):
    """Populate the root 10 <- 11 <- 12 example hierarchy."""
    put(services, 10, "5000", "cars")
    put(services, 11, "10000", "shopping", parent_id=10)
    put(services, 12, "5000", "shopping", parent_id=11)
    return services


class TestExitCodes:
    """Tests for mapping error kinds to exit codes."""

    def test_each_kind_has_distinct_code(self):
        assert exit_code_for(ErrorKind.NOT_FOUND) == 3
        assert exit_code_for(ErrorKind.INVALID_PARENT) == 4


class TestCommands:
    """Tests for individual transactions subcommands."""

    def test_show(self, tree, capsys):
        """Test printing a transaction as JSON."""
        cmd_show(Namespace(transaction_id=11), tree)

        assert json.loads(capsys.readouterr().out) == {
            "id": 11,
            "amount": "10000",
            "type": "shopping",
            "parent_id": 10,
        }

    def test_show_missing_exits_not_found(self, tree):
        """Test that an unknown ID exits with the not-found code."""
        with pytest.raises(SystemExit) as exc_info:
            cmd_show(Namespace(transaction_id=999), tree)

        assert exc_info.value.code == 3

    def test_types(self, tree, capsys):
        """Test listing IDs for a type, and for an unknown type."""
        cmd_types(Namespace(type="shopping"), tree)
        cmd_types(Namespace(type="nonexistent"), tree)

        lines = capsys.readouterr().out.splitlines()
        assert json.loads(lines[0]) == [11, 12]
        assert json.loads(lines[1]) == []

    def test_sum(self, tree, capsys):
        """Test printing a subtree sum."""
        cmd_sum(Namespace(transaction_id=10), tree)

        assert json.loads(capsys.readouterr().out) == {"sum": "20000"}

    def test_sum_missing_exits_not_found(self, tree):
        """Test that summing an unknown ID exits with the not-found code."""
        with pytest.raises(SystemExit) as exc_info:
            cmd_sum(Namespace(transaction_id=999), tree)

        assert exc_info.value.code == 3

    def test_tree_missing_exits_not_found(self, tree):
        with pytest.raises(SystemExit) as exc_info:
            cmd_tree(Namespace(transaction_id=999), tree)

        assert exc_info.value.code == 3

    def test_render_tree(self, tree):
        """Test the indented subtree rendering."""
        put(tree, 13, "1", "food", parent_id=10)

        assert render_tree(tree, 10) == [
            "10 [cars] 5000",
            "  11 [shopping] 10000",
            "    12 [shopping] 5000",
            "  13 [food] 1",
        ]

    def test_check_clean(self, tree):
        """Test that a clean store does not exit."""
        cmd_check(Namespace(), tree)

    def test_check_with_issues_exits(self, services, store):
        """Test that integrity issues exit with a failure code."""
        corrupt(store, 1, "1", parent_id=404)

        with pytest.raises(SystemExit) as exc_info:
            cmd_check(Namespace(), services)

        assert exc_info.value.code == 1


class TestShell:
    """Tests for execute_shell_command."""

    def test_put_and_get(self, services):
        """Test writing then reading a transaction."""
        assert execute_shell_command(services, "put 10 5000 cars") == '{"status": "ok"}'

        output = execute_shell_command(services, "get 10")

        assert json.loads(output) == {"id": 10, "amount": "5000", "type": "cars"}

    def test_put_with_parent_and_sum(self, services):
        """Test building a hierarchy and summing it."""
        execute_shell_command(services, "put 10 5000 cars")
        execute_shell_command(services, "put 11 10000 shopping 10")
        execute_shell_command(services, "put 12 5000 shopping 11")

        assert json.loads(execute_shell_command(services, "sum 10")) == {"sum": "20000"}
        assert json.loads(execute_shell_command(services, "type shopping")) == [11, 12]

    def test_quoted_type(self, services):
        """Test that a quoted type may contain spaces."""
        execute_shell_command(services, 'put 1 5 "car parts"')

        assert services.transactions.ids_by_type("car parts") == [1]

    def test_invalid_parent_reported(self, services):
        """Test that an invalid parent is reported with its kind."""
        output = execute_shell_command(services, "put 5 10 cars 5")

        assert output.startswith("error (invalid_parent):")
        assert services.transactions.get_by_id(5).ok is False

    def test_not_found_reported(self, services):
        assert execute_shell_command(services, "get 999") == (
            "error (not_found): Transaction 999 not found"
        )

    def test_validation_error_reported(self, services):
        """Test that boundary validation failures never reach the store."""
        output = execute_shell_command(services, "put 1 -5 cars")

        assert output.startswith("error:")
        assert "amount must be positive" in output
        assert services.transactions.find_all() == []

    def test_non_integer_id_reported(self, services):
        assert execute_shell_command(services, "get abc").startswith("error:")

    def test_usage_messages(self, services):
        """Test that wrong argument counts print usage."""
        assert execute_shell_command(services, "put 1 2").startswith("usage:")
        assert execute_shell_command(services, "get").startswith("usage:")
        assert execute_shell_command(services, "sum 1 2").startswith("usage:")
        assert execute_shell_command(services, "type").startswith("usage:")

    def test_unknown_command(self, services):
        assert "unknown command" in execute_shell_command(services, "frobnicate")

    def test_blank_help_and_quit(self, services):
        """Test blank lines, help and quit."""
        assert execute_shell_command(services, "   ") == ""
        assert "Commands:" in execute_shell_command(services, "help")
        assert execute_shell_command(services, "quit") is None
        assert execute_shell_command(services, "EXIT") is None


class TestMain:
    """Tests for the CLI entry point."""

    @pytest.fixture(autouse=True)
    def home(self, tmp_path, monkeypatch):
        """Point the config file at a temporary home directory."""
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path)
        return tmp_path

    @pytest.fixture
    def ledger(self, tmp_path):
        path = tmp_path / "ledger.csv"
        path.write_text(
            "id,amount,type,parent_id\n"
            "10,5000,cars,\n"
            "11,10000,shopping,10\n"
            "12,5000,shopping,11\n"
            "13,1,food,99\n"
        )
        return path

    def test_sum_from_ledger(self, ledger, monkeypatch, capsys):
        """Test loading a ledger then summing, with a rejected row reported."""
        monkeypatch.setattr(
            "sys.argv", ["cli", "--ledger", str(ledger), "transactions", "sum", "10"]
        )

        cli_main.main()

        out = capsys.readouterr().out
        assert json.loads(out.strip().splitlines()[-1]) == {"sum": "20000"}

    def test_missing_id_exit_code(self, ledger, monkeypatch):
        monkeypatch.setattr(
            "sys.argv", ["cli", "--ledger", str(ledger), "transactions", "show", "13"]
        )

        with pytest.raises(SystemExit) as exc_info:
            cli_main.main()

        assert exc_info.value.code == 3

    def test_rejected_entry_logged_once(self, ledger, monkeypatch, caplog):
        """Test that each rejected ledger row produces a single warning."""
        monkeypatch.setattr(
            "sys.argv", ["cli", "--ledger", str(ledger), "transactions", "sum", "10"]
        )

        with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
            cli_main.main()

        rejections = [r for r in caplog.records if "13" in r.getMessage()]
        assert len(rejections) == 1
        assert "rejected" in rejections[0].getMessage()

    def test_missing_ledger_file_exits(self, tmp_path, monkeypatch, capsys):
        """Test that an unreadable ledger is reported as a general error."""
        monkeypatch.setattr(
            "sys.argv",
            ["cli", "--ledger", str(tmp_path / "nope.csv"), "transactions", "types", "x"],
        )

        with pytest.raises(SystemExit) as exc_info:
            cli_main.main()

        assert exc_info.value.code == 1
        assert "Ledger file not found" in capsys.readouterr().out

    def test_writes_default_config(self, home, monkeypatch, capsys):
        """Test that the first run creates a default config file."""
        monkeypatch.setattr("sys.argv", ["cli", "transactions", "types", "cars"])

        cli_main.main()

        assert (home / ".config" / "ledgertree.toml").exists()
        assert json.loads(capsys.readouterr().out) == []

    def test_sum_is_decimal_string(self, tmp_path, monkeypatch, capsys):
        """Test that fractional sums print exactly."""
        ledger = tmp_path / "ledger.yaml"
        ledger.write_text(
            "- {id: 1, amount: 0.1, type: a}\n"
            "- {id: 2, amount: 0.2, type: a, parent_id: 1}\n"
        )
        monkeypatch.setattr(
            "sys.argv", ["cli", "--ledger", str(ledger), "transactions", "sum", "1"]
        )

        cli_main.main()

        assert json.loads(capsys.readouterr().out.strip()) == {"sum": "0.3"}
