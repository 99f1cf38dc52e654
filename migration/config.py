"""
Migration Configuration
Centralized configuration management using environment variables and dataclasses.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, List, Dict

from dotenv import load_dotenv

from migration.utils import parse_sas_url

# Load environment variables
load_dotenv()


AUTH_MODE_CERTIFICATE = "certificate"
AUTH_MODE_DELEGATED = "delegated"
AUTH_MODES = (AUTH_MODE_CERTIFICATE, AUTH_MODE_DELEGATED)

DEFAULT_REQUIRED_COLUMNS = ["Name", "Location", "Size (MB)", "Site Address"]
DEFAULT_COLUMN_MAP = {
    "Name": "name",
    "Location": "location",
    "Size (MB)": "size_mb",
    "Site Address": "site_address",
}


# Environment variable -> SharePointConfig attribute, per credential variant
_CERTIFICATE_FIELDS = {
    "TENANT": "tenant",
    "CLIENT_ID": "client_id",
    "CERT_THUMBPRINT": "thumbprint",
    "CERT_PATH": "cert_path",
}
_DELEGATED_FIELDS = {"SP_USERNAME": "username", "SP_PASSWORD": "password"}


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


@dataclass
class SharePointConfig:
    """SharePoint connection configuration (one credential variant per run)"""
    auth_mode: str = field(default_factory=lambda: os.getenv("AUTH_MODE", AUTH_MODE_CERTIFICATE).lower())

    # Service principal + certificate
    tenant: Optional[str] = field(default_factory=lambda: os.getenv("TENANT"))
    client_id: Optional[str] = field(default_factory=lambda: os.getenv("CLIENT_ID"))
    thumbprint: Optional[str] = field(default_factory=lambda: os.getenv("CERT_THUMBPRINT"))
    cert_path: Optional[str] = field(default_factory=lambda: os.getenv("CERT_PATH"))
    cert_passphrase: Optional[str] = field(default_factory=lambda: os.getenv("CERT_PASSPHRASE"))

    # Delegated user credential
    username: Optional[str] = field(default_factory=lambda: os.getenv("SP_USERNAME"))
    password: Optional[str] = field(default_factory=lambda: os.getenv("SP_PASSWORD"))

    def problems(self) -> List[str]:
        """Problems with the selected credential variant, by environment variable name"""
        if self.auth_mode not in AUTH_MODES:
            return [f"Unknown AUTH_MODE '{self.auth_mode}' (expected one of {', '.join(AUTH_MODES)})"]
        required = _CERTIFICATE_FIELDS if self.auth_mode == AUTH_MODE_CERTIFICATE else _DELEGATED_FIELDS
        missing = [env for env, attr in required.items() if not getattr(self, attr)]
        if missing:
            return [f"SharePoint {self.auth_mode} credentials incomplete: set {', '.join(missing)}"]
        return []

    def validate(self) -> bool:
        return not self.problems()


@dataclass
class BlobStorageConfig:
    """Azure Blob Storage configuration"""
    container_sas_url: Optional[str] = field(default_factory=lambda: os.getenv("CONTAINER_SAS_URL"))
    blob_folder_prefix: Optional[str] = field(default_factory=lambda: os.getenv("BLOB_FOLDER_PREFIX"))
    overwrite: bool = field(default_factory=lambda: _env_flag("BLOB_OVERWRITE", "true"))

    def problems(self) -> List[str]:
        if not self.container_sas_url:
            return ["Blob Storage configuration incomplete: set CONTAINER_SAS_URL"]
        sas = parse_sas_url(self.container_sas_url)
        if not sas.container_name:
            return ["CONTAINER_SAS_URL does not name a container"]
        if not sas.sas_token:
            return ["CONTAINER_SAS_URL carries no SAS token"]
        return []

    def validate(self) -> bool:
        return not self.problems()


@dataclass
class InventoryConfig:
    """Inventory spreadsheet configuration"""
    path: Optional[str] = field(default_factory=lambda: os.getenv("INVENTORY_PATH"))
    sheet_name: Optional[str] = field(default_factory=lambda: os.getenv("INVENTORY_SHEET"))
    required_columns: List[str] = field(default_factory=lambda: list(DEFAULT_REQUIRED_COLUMNS))
    # Spreadsheet column -> FileRecord field
    column_map: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COLUMN_MAP))
    release_locks: bool = field(default_factory=lambda: _env_flag("RELEASE_INVENTORY_LOCKS", "true"))

    def problems(self) -> List[str]:
        found = []
        if not self.path:
            found.append("Inventory configuration incomplete: set INVENTORY_PATH or pass --inventory")
        unmapped = [c for c in self.column_map if c not in self.required_columns]
        if unmapped:
            found.append(f"Inventory column map uses column(s) that are not required: {', '.join(unmapped)}")
        return found

    def validate(self) -> bool:
        return not self.problems()


@dataclass
class ProcessingConfig:
    """Staging and ledger configuration"""
    destination_root: str = field(default_factory=lambda: os.getenv("DESTINATION_ROOT", "./staging"))
    ledger_path: str = field(default_factory=lambda: os.getenv("LEDGER_PATH", "./migration_ledger.csv"))
    fail_on_empty_inventory: bool = field(default_factory=lambda: _env_flag("FAIL_ON_EMPTY_INVENTORY", "false"))
    record_download_failures: bool = field(default_factory=lambda: _env_flag("RECORD_DOWNLOAD_FAILURES", "false"))

    def problems(self) -> List[str]:
        missing = [env for env, value in (("DESTINATION_ROOT", self.destination_root),
                                          ("LEDGER_PATH", self.ledger_path)) if not value]
        if missing:
            return [f"Processing configuration incomplete: set {', '.join(missing)}"]
        return []

    def validate(self) -> bool:
        return not self.problems()


@dataclass
class MigrationConfig:
    """Main migration configuration aggregating all sub-configs"""
    sharepoint: SharePointConfig = field(default_factory=SharePointConfig)
    blob_storage: BlobStorageConfig = field(default_factory=BlobStorageConfig)
    inventory: InventoryConfig = field(default_factory=InventoryConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)

    def validate_all(self) -> tuple[bool, List[str]]:
        """
        Validate all configurations

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = [
            problem
            for section in (self.sharepoint, self.blob_storage, self.inventory, self.processing)
            for problem in section.problems()
        ]
        return not errors, errors

    def to_dict(self) -> dict:
        """Convert configuration to dictionary (excluding sensitive data)"""
        return {
            "sharepoint": {
                "auth_mode": self.sharepoint.auth_mode,
                "tenant": self.sharepoint.tenant,
                "client_id": self.sharepoint.client_id,
                "username": self.sharepoint.username,
            },
            "blob_storage": {
                "blob_folder_prefix": self.blob_storage.blob_folder_prefix,
                "overwrite": self.blob_storage.overwrite,
            },
            "inventory": {
                "path": self.inventory.path,
                "sheet_name": self.inventory.sheet_name,
                "required_columns": self.inventory.required_columns,
                "release_locks": self.inventory.release_locks,
            },
            "processing": {
                "destination_root": self.processing.destination_root,
                "ledger_path": self.processing.ledger_path,
                "fail_on_empty_inventory": self.processing.fail_on_empty_inventory,
                "record_download_failures": self.processing.record_download_failures,
            }
        }


# Process-wide configuration; the CLI mutates it with command-line overrides
_config_instance: Optional[MigrationConfig] = None


def get_config() -> MigrationConfig:
    global _config_instance
    if _config_instance is None:
        _config_instance = MigrationConfig()
    return _config_instance


def reload_config(env_file: Optional[str] = None) -> MigrationConfig:
    """
    Re-read the environment, discarding command-line overrides.

    Args:
        env_file: .env file to load over the current environment
            (default: search upwards from the working directory)

    Returns:
        The new process-wide MigrationConfig
    """
    global _config_instance
    load_dotenv(env_file, override=True)
    _config_instance = MigrationConfig()
    return _config_instance
