import sys
import os
import csv
import io
import logging

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from main import log_level_from_env, main, write_accounts
from payments_engine import PaymentsEngine


def output_rows(text):
    """Output rows keyed by client; row order is not part of the contract."""
    reader = csv.DictReader(io.StringIO(text))
    assert reader.fieldnames == ["client", "available", "held", "total", "locked"]
    return {row["client"]: row for row in reader}


def run_main(tmp_path, capsys, *rows):
    csv_file = tmp_path / "input.csv"
    csv_file.write_text('\n'.join(["type, client, tx, amount", *rows]))
    exit_code = main([str(csv_file)])
    captured = capsys.readouterr()
    return exit_code, output_rows(captured.out), captured.err


class TestMain:
    def test_deposit_and_withdrawal(self, tmp_path, capsys):
        exit_code, rows, err = run_main(
            tmp_path,
            capsys,
            "deposit, 1, 1, 1.0000",
            "deposit, 1, 2, 2.0000",
            "withdrawal, 1, 3, 1.5000",
        )

        assert exit_code == 0
        assert rows["1"] == {"client": "1", "available": "1.5000", "held": "0.0000", "total": "1.5000", "locked": "false"}
        assert "Processed: 3, Rejected: 0, in " in err
        assert " millis" in err

    def test_dispute_then_chargeback_then_deposit(self, tmp_path, capsys):
        _, rows, _ = run_main(tmp_path, capsys, "deposit, 1, 1, 5.0000", "dispute, 1, 1,")
        assert rows["1"] == {"client": "1", "available": "0.0000", "held": "5.0000", "total": "5.0000", "locked": "false"}

        _, rows, _ = run_main(
            tmp_path, capsys, "deposit, 1, 1, 5.0000", "dispute, 1, 1,", "chargeback, 1, 1,"
        )
        locked_row = {"client": "1", "available": "0.0000", "held": "0.0000", "total": "0.0000", "locked": "true"}
        assert rows["1"] == locked_row

        _, rows, err = run_main(
            tmp_path, capsys, "deposit, 1, 1, 5.0000", "dispute, 1, 1,", "chargeback, 1, 1,", "deposit, 1, 2, 3.0"
        )
        assert rows["1"] == locked_row
        assert "Processed: 3, Rejected: 1" in err

    def test_dispute_of_unknown_transaction_creates_no_account(self, tmp_path, capsys):
        _, rows, _ = run_main(tmp_path, capsys, "dispute, 1, 99,")
        assert rows == {}

    def test_same_input_twice_gives_identical_output(self, tmp_path, capsys):
        input_rows = [
            "deposit, 3, 1, 10.1234",
            "deposit, 1, 2, 0.5",
            "withdrawal, 3, 3, 0.1234",
            "dispute, 1, 2,",
            "deposit, 2, 4, 7",
            "dispute, 2, 4,",
            "chargeback, 2, 4,",
        ]
        _, first, _ = run_main(tmp_path, capsys, *input_rows)
        _, second, _ = run_main(tmp_path, capsys, *input_rows)

        assert first == second
        assert set(first) == {"1", "2", "3"}

    def test_usage(self, capsys):
        assert main([]) == 1
        assert "Usage" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.csv")]) == 1
        assert "Cannot read" in capsys.readouterr().err


class TestWriteAccounts:
    def test_renders_four_places(self, tmp_path):
        csv_file = tmp_path / "input.csv"
        csv_file.write_text("type,client,tx,amount\ndeposit,7,1,0.1\ndeposit,7,2,0.2\n")
        accounts = PaymentsEngine().process_file(str(csv_file))

        out = io.StringIO()
        write_accounts(accounts, out)

        assert out.getvalue().splitlines() == [
            "client,available,held,total,locked",
            "7,0.3000,0.0000,0.3000,false",
        ]


class TestLogLevel:
    def test_default_is_warning(self, monkeypatch):
        monkeypatch.delenv("PAYMENTS_LOG_LEVEL", raising=False)
        assert log_level_from_env() == logging.WARNING

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PAYMENTS_LOG_LEVEL", " debug ")
        assert log_level_from_env() == logging.DEBUG

    def test_unknown_level_falls_back_to_warning(self, monkeypatch, capsys):
        monkeypatch.setenv("PAYMENTS_LOG_LEVEL", "FOO")
        assert log_level_from_env() == logging.WARNING
        assert "Unknown PAYMENTS_LOG_LEVEL 'FOO'" in capsys.readouterr().err

    def test_cli_survives_unknown_level(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setenv("PAYMENTS_LOG_LEVEL", "FOO")
        exit_code, rows, _ = run_main(tmp_path, capsys, "deposit, 1, 1, 2.5")
        assert exit_code == 0
        assert rows["1"]["available"] == "2.5000"
