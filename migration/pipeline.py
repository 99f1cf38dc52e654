"""
Migration Pipeline
Loads the inventory, groups it by SharePoint site and moves every file to Azure
Blob Storage one site session and one staged file at a time.
"""

import logging
from typing import List, Optional

from migration.blob_storage import BlobStorageHelper
from migration.config import MigrationConfig, get_config
from migration.exceptions import EmptyInventoryError
from migration.grouping import group_by_site
from migration.inventory import InventoryLoader
from migration.ledger import AuditLedger
from migration.models import (
    EndpointGroup,
    FileRecord,
    RunSummary,
    SessionFailed,
    SessionOpened,
    TransferOutcome,
)
from migration.session import SessionFactory
from migration.transfer import Transfer

logger = logging.getLogger(__name__)


class MigrationPipeline:
    """
    Main migration orchestrator
    Coordinates inventory loading, site sessions, transfers and the audit ledger
    """

    def __init__(
        self,
        config: Optional[MigrationConfig] = None,
        session_factory: Optional[SessionFactory] = None,
        blob_storage: Optional[BlobStorageHelper] = None,
        ledger: Optional[AuditLedger] = None,
        loader: Optional[InventoryLoader] = None,
    ):
        """
        Initialize migration pipeline

        Collaborators are built from configuration unless supplied.

        Args:
            config: Migration configuration
            session_factory: SharePoint session factory
            blob_storage: Blob Storage helper
            ledger: Audit ledger
            loader: Inventory loader
        """
        self.config = config or get_config()
        # Built lazily: planning needs no credentials and command-line overrides
        # may change the configuration after construction
        self._loader = loader
        self._ledger = ledger
        self._session_factory = session_factory
        self._blob_storage = blob_storage

    @property
    def loader(self) -> InventoryLoader:
        if self._loader is None:
            self._loader = InventoryLoader.from_config(self.config.inventory)
        return self._loader

    @property
    def ledger(self) -> AuditLedger:
        if self._ledger is None:
            self._ledger = AuditLedger(self.config.processing.ledger_path)
        return self._ledger

    @property
    def session_factory(self) -> SessionFactory:
        if self._session_factory is None:
            self._session_factory = SessionFactory(self.config.sharepoint)
        return self._session_factory

    @property
    def blob_storage(self) -> BlobStorageHelper:
        if self._blob_storage is None:
            self._blob_storage = BlobStorageHelper(self.config.blob_storage.container_sas_url)
        return self._blob_storage

    def _build_transfer(self) -> Transfer:
        return Transfer(
            blob_storage=self.blob_storage,
            ledger=self.ledger,
            destination_root=self.config.processing.destination_root,
            blob_folder_prefix=self.config.blob_storage.blob_folder_prefix,
            overwrite=self.config.blob_storage.overwrite,
            record_download_failures=self.config.processing.record_download_failures,
        )

    def load_inventory(self, inventory_path: Optional[str] = None) -> List[FileRecord]:
        """
        Load the inventory; fatal errors propagate.

        Args:
            inventory_path: Overrides the configured inventory path

        Returns:
            Validated records
        """
        path = inventory_path or self.config.inventory.path
        records = self.loader.load(path)

        if not records and self.config.processing.fail_on_empty_inventory:
            raise EmptyInventoryError(f"Inventory contains no records: {path}")
        return records

    def plan(self, inventory_path: Optional[str] = None) -> List[EndpointGroup]:
        """Load and group the inventory without opening any session"""
        return group_by_site(self.load_inventory(inventory_path))

    def run(self, inventory_path: Optional[str] = None) -> RunSummary:
        """
        Run the migration.

        Args:
            inventory_path: Overrides the configured inventory path

        Returns:
            RunSummary with per-outcome counters and collected warnings
        """
        records = self.load_inventory(inventory_path)
        summary = RunSummary(total_records=len(records))

        if not records:
            logger.info("Inventory is empty, nothing to migrate")
            return summary

        groups = group_by_site(records)
        summary.groups = len(groups)
        transfer = self._build_transfer()

        for index, group in enumerate(groups, 1):
            logger.info(f"Site {index}/{len(groups)}: {group.address} ({len(group)} file(s))")
            self._run_group(group, transfer, summary)

        logger.info(
            f"Migration completed: {summary.uploaded} uploaded, {summary.upload_failed} upload failed, "
            f"{summary.download_failed} download failed, {summary.skipped_records} skipped"
        )
        return summary

    def _run_group(self, group: EndpointGroup, transfer: Transfer, summary: RunSummary) -> None:
        with self.session_factory.session(group.address) as opened:
            if isinstance(opened, SessionOpened):
                summary.sessions_opened += 1
                self._transfer_records(opened.session, group, transfer, summary)
            elif isinstance(opened, SessionFailed):
                message = f"Skipping {len(group)} file(s) for {group.address}: {opened.error}"
                logger.warning(message)
                summary.warn(message)
                summary.sessions_failed += 1
                summary.skipped_records += len(group)
            else:
                raise TypeError(f"Unexpected session result: {opened!r}")

    def _transfer_records(self, session, group: EndpointGroup, transfer: Transfer, summary: RunSummary) -> None:
        for position, record in enumerate(group.records, 1):
            logger.info(f"  [{position}/{len(group)}] {record.name}")
            summary.transfers_attempted += 1
            try:
                result = transfer.run(session, record)
            except Exception as e:
                message = f"Transfer of {record.name} aborted: {e}"
                logger.warning(message)
                summary.warn(message)
                summary.errored += 1
                continue

            summary.record(result)
            if result.outcome == TransferOutcome.DOWNLOAD_FAILED:
                summary.warn(f"Download failed for {record.name}: {result.error}")
            elif result.outcome == TransferOutcome.UPLOAD_FAILED:
                summary.warn(f"Upload failed for {record.name}: {result.error}")
