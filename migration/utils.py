"""
Migration Utilities Module
Small helpers shared by the pipeline stages: SAS URL parsing, size formatting,
timestamps and staged-file cleanup.
"""

import os
import logging
from datetime import datetime
from typing import NamedTuple, Optional
from urllib.parse import unquote, urlparse

logger = logging.getLogger(__name__)

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


class ContainerSas(NamedTuple):
    """A container SAS URL split into what the Blob client needs"""
    account_url: str
    container_name: Optional[str]
    sas_token: str


def parse_sas_url(sas_url: str) -> ContainerSas:
    """
    Split a container SAS URL.

    Args:
        sas_url: e.g. https://account.blob.core.windows.net/archive?sv=...&sig=...

    Returns:
        ContainerSas; container_name is None when the URL names no container
    """
    parsed = urlparse(sas_url.strip())
    segments = [s for s in parsed.path.split("/") if s]
    return ContainerSas(
        account_url=f"{parsed.scheme}://{parsed.netloc}",
        container_name=unquote(segments[0]) if segments else None,
        sas_token=parsed.query,
    )


def format_size(num_bytes: float) -> str:
    """
    Render a byte count as a human readable string.

    Args:
        num_bytes: Size in bytes

    Returns:
        String such as "512 B", "1.50 MB" or "2.00 GB"
    """
    size = float(num_bytes)
    for unit in _SIZE_UNITS:
        if size < 1024 or unit == _SIZE_UNITS[-1]:
            if unit == "B":
                return f"{int(size)} B"
            return f"{size:.2f} {unit}"
        size /= 1024
    return f"{size:.2f} {_SIZE_UNITS[-1]}"


def timestamp(now: Optional[datetime] = None) -> str:
    """Local timestamp used in the audit ledger"""
    return (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")


def remove_quietly(path: Optional[str]) -> bool:
    """
    Delete a staged file if it exists.

    Args:
        path: Local file path (None is ignored)

    Returns:
        True if the file is gone afterwards
    """
    if not path:
        return True
    try:
        os.remove(path)
        logger.info(f"Removed staged file: {path}")
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove staged file {path}: {e}")
        return False
    return True
