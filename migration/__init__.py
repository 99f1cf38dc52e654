"""
SharePoint Archive Migration Package

Moves large archive files listed in an inventory spreadsheet from SharePoint
document libraries into Azure Blob Storage:
- Loading and validating the inventory spreadsheet
- Grouping files by SharePoint site and opening one session per site
- Download -> upload -> audit -> cleanup for every file
- Append-only CSV audit ledger of every transfer attempt

Main Components:
- config: Configuration management
- inventory: Spreadsheet loading and validation
- grouping: Partitioning records by site address
- session: SharePoint session lifecycle
- transfer: Single-file transfer
- ledger: Audit ledger
- pipeline: Run orchestration
"""

__version__ = "1.0.0"

from migration.config import get_config, reload_config, MigrationConfig
from migration.exceptions import (
    MigrationError,
    InventoryNotFoundError,
    InventorySchemaError,
    InventoryLockedError,
    InventoryReadError,
    EmptyInventoryError,
)
from migration.models import FileRecord, EndpointGroup, LedgerEntry, LedgerStatus, RunSummary
from migration.inventory import InventoryLoader
from migration.grouping import group_by_site, records_for, site_addresses
from migration.ledger import AuditLedger
from migration.pipeline import MigrationPipeline

__all__ = [
    # Configuration
    "get_config",
    "reload_config",
    "MigrationConfig",

    # Errors
    "MigrationError",
    "InventoryNotFoundError",
    "InventorySchemaError",
    "InventoryLockedError",
    "InventoryReadError",
    "EmptyInventoryError",

    # Data model
    "FileRecord",
    "EndpointGroup",
    "LedgerEntry",
    "LedgerStatus",
    "RunSummary",

    # Components
    "InventoryLoader",
    "group_by_site",
    "records_for",
    "site_addresses",
    "AuditLedger",
    "MigrationPipeline",
]
