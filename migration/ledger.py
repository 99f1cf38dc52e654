"""
Append-only CSV audit ledger.

One row per transfer attempt, header written on first append. Rows are never
rewritten or removed by the pipeline.
"""

import csv
import os
import logging
from typing import List

from migration.models import LEDGER_COLUMNS, LedgerEntry

logger = logging.getLogger(__name__)


class AuditLedger:
    """CSV ledger with columns FileName, FilePath, Size, UploadTime, Status"""

    def __init__(self, path: str):
        """
        Args:
            path: Ledger file path (created on first append)
        """
        self.path = path

    def _needs_header(self) -> bool:
        return not os.path.exists(self.path) or os.path.getsize(self.path) == 0

    def append(self, entry: LedgerEntry) -> None:
        """
        Append one entry, writing the header first if the ledger is new.

        Args:
            entry: Ledger entry to record
        """
        parent = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(parent, exist_ok=True)

        write_header = self._needs_header()
        with open(self.path, "a", newline="", encoding="utf-8") as fh:
            writer = csv.DictWriter(fh, fieldnames=LEDGER_COLUMNS)
            if write_header:
                writer.writeheader()
            writer.writerow(entry.to_row())

        logger.debug(f"Ledger: {entry.file_name} -> {entry.status.value}")

    def read_entries(self) -> List[LedgerEntry]:
        """Return every entry recorded so far (empty if the ledger does not exist)"""
        if not os.path.exists(self.path):
            return []

        with open(self.path, newline="", encoding="utf-8") as fh:
            return [LedgerEntry.from_row(row) for row in csv.DictReader(fh)]
