import csv
import logging
import os
import sys
import time
from typing import Dict, List, Optional, TextIO

from models import ClientAccount
from money import format_amount
from payments_engine import PaymentsEngine

LOG_LEVEL_ENV = "PAYMENTS_LOG_LEVEL"

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    level = logging.INFO if verbose else log_level_from_env()
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def log_level_from_env() -> int:
    name = os.environ.get(LOG_LEVEL_ENV, "WARNING").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        print(f"Unknown {LOG_LEVEL_ENV} {name!r}, using WARNING", file=sys.stderr)
        return logging.WARNING
    return level


def write_accounts(accounts: Dict[int, ClientAccount], out: TextIO) -> None:
    """Write one CSV row per account. Row order carries no meaning."""
    print("client,available,held,total,locked", file=out)
    for client_id in sorted(accounts.keys()):
        account = accounts[client_id]
        print(
            f"{client_id},"
            f"{format_amount(account.available)},"
            f"{format_amount(account.held)},"
            f"{format_amount(account.total)},"
            f"{str(account.locked).lower()}",
            file=out,
        )


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    verbose = "-v" in args
    paths = [arg for arg in args if arg != "-v"]
    if len(paths) != 1:
        print("Usage: python main.py <input.csv> [-v]", file=sys.stderr)
        return 1

    configure_logging(verbose)

    engine = PaymentsEngine()
    started = time.perf_counter()
    try:
        accounts = engine.process_file(paths[0])
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        print(f"Cannot read {paths[0]}: {e}", file=sys.stderr)
        return 1

    elapsed_ms = (time.perf_counter() - started) * 1000

    write_accounts(accounts, sys.stdout)

    stats = engine.stats
    print(
        f"Processed: {stats.processed}, Rejected: {stats.rejected}, in {elapsed_ms:.0f} millis",
        file=sys.stderr,
    )
    for code, count in sorted(stats.rejections.items()):
        logger.info(f"  {code}: {count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
