"""
Partition inventory records by SharePoint site address.

Inventory rows sometimes record the site address with trailing library or
folder segments ("https://tenant/sites/archive/Shared Documents"). Such a row
belongs to the shortest recorded address it extends, so one session serves it.
"""

import logging
from typing import Dict, Iterable, List, Sequence

from migration.models import EndpointGroup, FileRecord

logger = logging.getLogger(__name__)


def normalize_address(address: str) -> str:
    return address.strip().rstrip("/")


def _address_key(address: str) -> str:
    # SharePoint URLs are case-insensitive
    return normalize_address(address).casefold()


def address_matches(address: str, record_address: str) -> bool:
    """True when record_address is address or extends it by whole path segments"""
    address = _address_key(address)
    record_address = _address_key(record_address)
    return record_address == address or record_address.startswith(address + "/")


def site_addresses(records: Iterable[FileRecord]) -> List[str]:
    """
    Distinct site addresses, sorted.

    Addresses differing only in case are one site, reported with the first
    spelling seen. Addresses that merely extend another recorded address are
    folded into it.
    """
    spellings: Dict[str, str] = {}
    for record in records:
        spellings.setdefault(_address_key(record.site_address), normalize_address(record.site_address))

    roots = [
        key for key in spellings
        if not any(other != key and key.startswith(other + "/") for other in spellings)
    ]
    return sorted((spellings[key] for key in roots), key=str.casefold)


def records_for(address: str, records: Sequence[FileRecord]) -> List[FileRecord]:
    """
    Records served by the given site address, in inventory order.

    Args:
        address: Site address to match
        records: Full inventory
    """
    return [r for r in records if address_matches(address, r.site_address)]


def group_by_site(records: Sequence[FileRecord]) -> List[EndpointGroup]:
    """
    Partition records into endpoint groups in sorted address order.

    Args:
        records: Full inventory

    Returns:
        One EndpointGroup per site address
    """
    groups = [
        EndpointGroup(address=address, records=tuple(records_for(address, records)))
        for address in site_addresses(records)
    ]
    logger.info(f"Grouped {len(records)} records into {len(groups)} site(s)")
    return groups
