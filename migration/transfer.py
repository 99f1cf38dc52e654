"""
Single-file transfer: SharePoint download -> Blob upload -> ledger -> cleanup.

The staged copy is always removed and, once the download has succeeded, a ledger
entry is always written, so at most one file is ever staged locally.
"""

import os
import logging
from typing import Optional
from urllib.parse import unquote, urlparse

from azure.core.exceptions import AzureError
from office365.sharepoint.client_context import ClientContext

from migration.blob_storage import BlobStorageHelper
from migration.ledger import AuditLedger
from migration.models import (
    FileRecord,
    LedgerEntry,
    LedgerStatus,
    TransferOutcome,
    TransferResult,
)
from migration.utils import format_size, remove_quietly, timestamp

logger = logging.getLogger(__name__)


def server_relative_path(location: str) -> str:
    """Decoded URL path of a SharePoint file location"""
    return unquote(urlparse(location).path)


def resolve_local_path(record: FileRecord, destination_root: str) -> str:
    """
    Map the remote folder hierarchy of a record under the destination root.

    Args:
        record: Inventory record
        destination_root: Local staging root

    Returns:
        Local file path (parent directories are created)
    """
    segments = [s for s in server_relative_path(record.location).split("/") if s not in ("", ".", "..")]
    if not segments:
        segments = [record.name]

    local_path = os.path.join(os.path.abspath(destination_root), *segments)
    os.makedirs(os.path.dirname(local_path), exist_ok=True)
    return local_path


def blob_key_for(local_path: str, destination_root: str, prefix: Optional[str] = None) -> str:
    """
    Storage key for a staged file: its path relative to the destination root,
    with forward slashes, optionally under a folder prefix.
    """
    relative = os.path.relpath(os.path.abspath(local_path), os.path.abspath(destination_root))
    key = relative.replace(os.sep, "/").replace("\\", "/").lstrip("/")
    if prefix:
        key = f"{prefix.strip('/')}/{key}"
    return key


class Transfer:
    """Moves one inventory record from SharePoint to Blob Storage"""

    def __init__(
        self,
        blob_storage: BlobStorageHelper,
        ledger: AuditLedger,
        destination_root: str,
        blob_folder_prefix: Optional[str] = None,
        overwrite: bool = True,
        record_download_failures: bool = False,
    ):
        """
        Args:
            blob_storage: Destination container helper
            ledger: Audit ledger
            destination_root: Local staging root
            blob_folder_prefix: Optional virtual folder for blob keys
            overwrite: Overwrite blobs that already exist
            record_download_failures: Write a DownloadFailed ledger row instead of only warning
        """
        self.blob_storage = blob_storage
        self.ledger = ledger
        self.destination_root = destination_root
        self.blob_folder_prefix = blob_folder_prefix
        self.overwrite = overwrite
        self.record_download_failures = record_download_failures

    def download(self, session: ClientContext, record: FileRecord, local_path: str) -> str:
        """
        Download a file from SharePoint

        Args:
            session: Authenticated ClientContext for the record's site
            record: Inventory record
            local_path: Local path to save

        Returns:
            Local file path
        """
        remote_path = server_relative_path(record.location)
        with open(local_path, "wb") as local_file:
            session.web.get_file_by_server_relative_url(remote_path).download(local_file).execute_query()

        logger.info(f"Downloaded from SharePoint: {remote_path} -> {local_path}")
        return local_path

    def run(self, session: ClientContext, record: FileRecord) -> TransferResult:
        """
        Transfer one record.

        Flow: Resolve path -> Download -> Upload -> Ledger -> Delete staged copy

        Args:
            session: Authenticated ClientContext for the record's site
            record: Inventory record

        Returns:
            TransferResult describing the outcome
        """
        local_path = resolve_local_path(record, self.destination_root)
        blob_name = blob_key_for(local_path, self.destination_root, self.blob_folder_prefix)

        # STEP 1: Download to staging
        try:
            self.download(session, record, local_path)
        except Exception as e:
            logger.warning(f"Download failed for {record.name}: {e}")
            remove_quietly(local_path)
            entry = None
            if self.record_download_failures:
                entry = self._entry(record, blob_name, None, LedgerStatus.DOWNLOAD_FAILED)
                self.ledger.append(entry)
            return TransferResult(
                record=record,
                outcome=TransferOutcome.DOWNLOAD_FAILED,
                local_path=local_path,
                blob_name=blob_name,
                error=str(e),
                ledger_entry=entry,
            )

        # STEP 2: Upload, then always log and clean up
        status = LedgerStatus.FAILED
        blob_url = None
        error = None
        entry = None
        try:
            blob_url = self.blob_storage.upload_file(local_path, blob_name, overwrite=self.overwrite)
            status = LedgerStatus.UPLOADED
        except (AzureError, OSError) as e:
            error = str(e)
            logger.warning(f"Upload failed for {record.name}: {e}")
        finally:
            try:
                entry = self._entry(record, blob_name, local_path, status)
                self.ledger.append(entry)
            finally:
                remove_quietly(local_path)

        return TransferResult(
            record=record,
            outcome=TransferOutcome.UPLOADED if status == LedgerStatus.UPLOADED else TransferOutcome.UPLOAD_FAILED,
            local_path=local_path,
            blob_name=blob_name,
            blob_url=blob_url,
            error=error,
            ledger_entry=entry,
        )

    def _entry(
        self,
        record: FileRecord,
        blob_name: str,
        local_path: Optional[str],
        status: LedgerStatus,
    ) -> LedgerEntry:
        if local_path and os.path.exists(local_path):
            size = format_size(os.path.getsize(local_path))
        else:
            size = format_size(record.size_mb * 1024 * 1024)

        return LedgerEntry(
            file_name=record.name,
            file_path=blob_name,
            size=size,
            upload_time=timestamp(),
            status=status,
        )
