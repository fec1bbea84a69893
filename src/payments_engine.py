import csv
import logging
from typing import Dict, Iterator, Optional, TextIO

from errors import MalformedRecordError
from ledger_engine import LedgerEngine
from models import AMOUNT_TYPES, ClientAccount, ProcessingStats, Transaction, TransactionType
from money import to_amount

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Reads transaction CSV input and feeds it, row by row and in file order,
    to a LedgerEngine. Rows that cannot be parsed are rejected and counted
    like any other bad record.
    """

    def __init__(self):
        self._ledger = LedgerEngine()

    @property
    def stats(self) -> ProcessingStats:
        return self._ledger.stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing {filepath}")
        with open(filepath, "r", newline="") as f:
            accounts = self.process_stream(f)

        logger.info(f"Processed: {self.stats.processed}, Rejected: {self.stats.rejected}")
        return accounts

    def process_stream(self, stream: TextIO) -> Dict[int, ClientAccount]:
        for transaction in self._read_transactions(stream):
            self._ledger.process_transaction(transaction)
        return self._ledger.accounts()

    def _read_transactions(self, stream: TextIO) -> Iterator[Transaction]:
        reader = csv.DictReader(stream)
        for row in reader:
            try:
                yield parse_csv_row(row)
            except MalformedRecordError as e:
                logger.warning(f"Failed to parse row {row} (line {reader.line_num}): {e}")
                self.stats.record_rejection(e)


def parse_csv_row(row: Dict[Optional[str], Optional[str]]) -> Transaction:
    """Parse CSV row into Transaction."""
    # Extra trailing fields land under the None key; missing ones have None values
    normalized = {k.strip().lower(): (v or "").strip() for k, v in row.items() if k is not None}

    try:
        transaction_type = TransactionType(normalized["type"].lower())
        client_id = _parse_unsigned(normalized["client"], "client")
        transaction_id = _parse_unsigned(normalized["tx"], "tx")
    except KeyError as e:
        raise MalformedRecordError(f"missing column {e}")
    except ValueError as e:
        raise MalformedRecordError(str(e))

    amount = None
    amount_str = normalized.get("amount", "")
    if transaction_type in AMOUNT_TYPES:
        if not amount_str:
            raise MalformedRecordError(f"{transaction_type.value} requires an amount", client_id, transaction_id)
        try:
            amount = to_amount(amount_str)
        except ValueError as e:
            raise MalformedRecordError(str(e), client_id, transaction_id)
        if amount < 0:
            raise MalformedRecordError(f"negative amount {amount}", client_id, transaction_id)
    elif amount_str:
        logger.debug(f"Ignoring amount {amount_str!r} on {transaction_type.value} tx {transaction_id}")

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_unsigned(value: str, column: str) -> int:
    if not (value.isascii() and value.isdigit()):
        raise ValueError(f"{column} must be an unsigned integer, got {value!r}")
    return int(value)
