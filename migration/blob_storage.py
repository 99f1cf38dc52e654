"""
Azure Blob Storage destination.
Uploads are authenticated with the container SAS token; no per-call credentials.
"""

import os
import logging
from typing import Optional

from azure.storage.blob import ContainerClient

from migration.exceptions import ConfigurationError
from migration.utils import format_size, parse_sas_url

logger = logging.getLogger(__name__)


class BlobStorageHelper:
    """Streams staged archive files into the destination container"""

    def __init__(
        self,
        container_sas_url: str,
        container_client: Optional[ContainerClient] = None,
        max_concurrency: int = 4
    ):
        """
        Args:
            container_sas_url: Full SAS URL to the destination container
            container_client: Pre-built container client (tests, custom transports)
            max_concurrency: Parallel block uploads per file
        """
        sas = parse_sas_url(container_sas_url)
        if not sas.container_name:
            raise ConfigurationError("Container SAS URL does not name a container")
        if not sas.sas_token:
            raise ConfigurationError("Container SAS URL carries no SAS token")

        self.account_url = sas.account_url
        self.container_name = sas.container_name
        self.max_concurrency = max_concurrency
        self.container_client = container_client or ContainerClient(
            account_url=sas.account_url,
            container_name=sas.container_name,
            credential=sas.sas_token,
        )
        logger.info(f"Blob destination: {self.account_url}/{self.container_name}")

    def upload_file(self, local_path: str, blob_name: str, overwrite: bool = True) -> str:
        """
        Upload one staged file.

        Args:
            local_path: Staged file
            blob_name: Key inside the container
            overwrite: Replace an existing blob with the same key

        Returns:
            URL of the uploaded blob

        Raises:
            AzureError: the service rejected the upload; the caller records it
        """
        size = os.path.getsize(local_path)
        blob_client = self.container_client.get_blob_client(blob_name)

        with open(local_path, "rb") as data:
            blob_client.upload_blob(
                data,
                length=size,
                overwrite=overwrite,
                max_concurrency=self.max_concurrency,
            )

        logger.info(f"Uploaded {blob_name} ({format_size(size)}) to container {self.container_name}")
        return blob_client.url
