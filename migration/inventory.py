"""
Inventory loader.

Reads the inventory spreadsheet with pandas, checks the required columns are
present and converts every row into a validated FileRecord.
"""

import os
import logging
from typing import Callable, Dict, List, Optional
from zipfile import BadZipFile

import pandas as pd
import psutil
from openpyxl.utils.exceptions import InvalidFileException
from pandas.errors import EmptyDataError
from pydantic import ValidationError

from migration.config import DEFAULT_COLUMN_MAP, DEFAULT_REQUIRED_COLUMNS, InventoryConfig
from migration.exceptions import (
    InventoryLockedError,
    InventoryNotFoundError,
    InventoryReadError,
    InventorySchemaError,
)
from migration.models import FileRecord

logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = (".xlsx", ".xlsm")


def release_file_lock(path: str, timeout: float = 10.0) -> int:
    """
    Terminate processes that hold the given file open.

    Args:
        path: File that could not be read
        timeout: Seconds to wait for each process before killing it

    Returns:
        Number of processes terminated
    """
    target = os.path.realpath(path)
    terminated = 0

    for proc in psutil.process_iter(["pid", "name"]):
        if proc.pid == os.getpid():
            continue
        try:
            open_paths = {os.path.realpath(f.path) for f in proc.open_files()}
        except psutil.Error:
            continue

        if target not in open_paths:
            continue

        logger.warning(f"Terminating {proc.info.get('name')} (pid {proc.pid}) holding {path}")
        try:
            proc.terminate()
            try:
                proc.wait(timeout=timeout)
            except psutil.TimeoutExpired:
                proc.kill()
        except psutil.NoSuchProcess:
            pass
        except psutil.Error as e:
            logger.warning(f"Could not terminate pid {proc.pid}: {e}")
            continue
        terminated += 1

    return terminated


class InventoryLoader:
    """Loads FileRecords from the inventory spreadsheet"""

    def __init__(
        self,
        required_columns: Optional[List[str]] = None,
        column_map: Optional[Dict[str, str]] = None,
        sheet_name: Optional[str] = None,
        release_locks: bool = True,
        lock_releaser: Callable[[str], int] = release_file_lock,
    ):
        """
        Args:
            required_columns: Column headers that must be present
            column_map: Spreadsheet column -> FileRecord field
            sheet_name: Worksheet to read (first sheet when None)
            release_locks: Terminate lock holders and retry once on PermissionError
            lock_releaser: Callable used to release a lock on the inventory file
        """
        self.required_columns = list(required_columns or DEFAULT_REQUIRED_COLUMNS)
        self.column_map = dict(column_map or DEFAULT_COLUMN_MAP)
        self.sheet_name = sheet_name
        self.release_locks = release_locks
        self.lock_releaser = lock_releaser

    @classmethod
    def from_config(cls, config: InventoryConfig) -> "InventoryLoader":
        return cls(
            required_columns=config.required_columns,
            column_map=config.column_map,
            sheet_name=config.sheet_name,
            release_locks=config.release_locks,
        )

    def load(self, path: str) -> List[FileRecord]:
        """
        Load and validate the inventory.

        Args:
            path: Spreadsheet path (.xlsx, .xlsm or .csv)

        Returns:
            FileRecords in spreadsheet order (empty list for an empty inventory)

        Raises:
            InventoryNotFoundError: path does not exist
            InventorySchemaError: required column or value missing
            InventoryLockedError: file still locked after one release attempt
            InventoryReadError: file is not a readable spreadsheet or UTF-8 CSV
        """
        if not os.path.exists(path):
            raise InventoryNotFoundError(path)

        frame = self._read_with_lock_retry(path)
        if frame.empty and len(frame.columns) == 0:
            logger.info(f"Inventory has no header and no records: {path}")
            return []
        self._validate_columns(frame)

        records = []
        for index, row in frame.iterrows():
            records.append(self._to_record(row, index))

        logger.info(f"Loaded {len(records)} records from inventory: {path}")
        return records

    def _read_with_lock_retry(self, path: str) -> pd.DataFrame:
        try:
            return self._read(path)
        except PermissionError as e:
            if not self.release_locks:
                raise InventoryLockedError(f"Inventory is locked by another process: {path}") from e

            logger.warning(f"Inventory is locked, releasing lock and retrying once: {path}")
            try:
                released = self.lock_releaser(path)
                logger.info(f"Released {released} lock holder(s) on {path}")
            except (psutil.Error, OSError) as release_error:
                logger.warning(f"Could not release lock on {path}: {release_error}")

        try:
            return self._read(path)
        except PermissionError as e:
            raise InventoryLockedError(f"Inventory is still locked after releasing: {path}") from e

    def _read(self, path: str) -> pd.DataFrame:
        try:
            if path.lower().endswith(EXCEL_EXTENSIONS):
                frame = pd.read_excel(
                    path,
                    sheet_name=self.sheet_name if self.sheet_name else 0,
                    dtype=str,
                    engine="openpyxl",
                )
            else:
                frame = pd.read_csv(path, dtype=str, encoding="utf-8-sig")
        except EmptyDataError:
            # 0-byte CSV: no header, no records
            return pd.DataFrame()
        except UnicodeDecodeError as e:
            raise InventoryReadError(path, f"not UTF-8 text: {e.reason}") from e
        except (ValueError, BadZipFile, InvalidFileException) as e:
            raise InventoryReadError(path, str(e)) from e

        frame.columns = [str(c).strip() for c in frame.columns]
        # Fully blank rows are spreadsheet padding, not records
        frame = frame.dropna(how="all").reset_index(drop=True)
        logger.debug(f"Inventory read: {len(frame)} rows, {len(frame.columns)} columns")
        return frame

    def _validate_columns(self, frame: pd.DataFrame) -> None:
        missing = [c for c in self.required_columns if c not in frame.columns]
        if missing:
            raise InventorySchemaError(
                f"Inventory is missing required column(s): {', '.join(missing)}",
                missing_columns=missing,
            )

    def _to_record(self, row: pd.Series, index: int) -> FileRecord:
        values = {}
        for column, field_name in self.column_map.items():
            value = row.get(column)
            values[field_name] = None if pd.isna(value) else value

        try:
            return FileRecord(**values)
        except ValidationError as e:
            # +2: one for the header row, one for 1-based numbering
            fields = ", ".join(str(err["loc"][0]) for err in e.errors())
            raise InventorySchemaError(f"Inventory row {index + 2} has invalid or missing value(s): {fields}") from e
