"""Shared fixtures for migration tests."""

import pandas as pd
import pytest

from migration.config import (
    BlobStorageConfig,
    InventoryConfig,
    MigrationConfig,
    ProcessingConfig,
    SharePointConfig,
)

from helpers import COLUMNS, FakeBlobStorage, FakeSharePoint

_ENV_VARS = [
    "AUTH_MODE", "TENANT", "CLIENT_ID", "CERT_THUMBPRINT", "CERT_PATH", "CERT_PASSPHRASE",
    "SP_USERNAME", "SP_PASSWORD", "CONTAINER_SAS_URL", "BLOB_FOLDER_PREFIX", "BLOB_OVERWRITE",
    "INVENTORY_PATH", "INVENTORY_SHEET", "RELEASE_INVENTORY_LOCKS", "DESTINATION_ROOT",
    "LEDGER_PATH", "FAIL_ON_EMPTY_INVENTORY", "RECORD_DOWNLOAD_FAILURES",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep developer .env values out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def write_inventory(tmp_path):
    """Write an .xlsx inventory and return its path."""

    def _write(rows, columns=None, file_name="inventory.xlsx"):
        path = tmp_path / file_name
        frame = pd.DataFrame(rows, columns=columns or COLUMNS)
        if file_name.endswith(".csv"):
            frame.to_csv(path, index=False)
        else:
            frame.to_excel(path, index=False)
        return str(path)

    return _write


@pytest.fixture()
def config(tmp_path):
    return MigrationConfig(
        sharepoint=SharePointConfig(
            auth_mode="certificate",
            tenant="contoso.onmicrosoft.com",
            client_id="00000000-0000-0000-0000-000000000001",
            thumbprint="AB12CD34",
            cert_path=str(tmp_path / "cert.pem"),
            cert_passphrase=None,
            username=None,
            password=None,
        ),
        blob_storage=BlobStorageConfig(
            container_sas_url="https://acct.blob.core.windows.net/archive?sv=2024-01-01&sig=abc",
            blob_folder_prefix=None,
            overwrite=True,
        ),
        inventory=InventoryConfig(path=str(tmp_path / "inventory.xlsx"), sheet_name=None, release_locks=False),
        processing=ProcessingConfig(
            destination_root=str(tmp_path / "staging"),
            ledger_path=str(tmp_path / "ledger.csv"),
            fail_on_empty_inventory=False,
            record_download_failures=False,
        ),
    )


@pytest.fixture()
def sharepoint():
    return FakeSharePoint()


@pytest.fixture()
def blob_storage():
    return FakeBlobStorage()
