"""
Data model for the migration pipeline.

Inventory rows and ledger rows are pydantic models so that a FileRecord only
exists once every required field has been validated. Stage results are plain
dataclasses the driver matches on to decide whether to continue with the next
file, skip an endpoint group or stop.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Inventory / Ledger records
# ============================================================================

class FileRecord(BaseModel):
    """One inventory row"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    size_mb: float = Field(..., ge=0)
    site_address: str = Field(..., min_length=1)

    @field_validator("name", "location", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("site_address", mode="before")
    @classmethod
    def _normalize_address(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().rstrip("/")
        return value

    @field_validator("size_mb", mode="before")
    @classmethod
    def _parse_size(cls, value: Any) -> Any:
        # Spreadsheets often carry thousands separators ("1,024.5")
        if isinstance(value, str):
            return value.replace(",", "").strip()
        return value


class LedgerStatus(str, Enum):
    """Terminal status of a transfer attempt"""
    UPLOADED = "Uploaded"
    FAILED = "Failed"
    DOWNLOAD_FAILED = "DownloadFailed"


LEDGER_COLUMNS = ["FileName", "FilePath", "Size", "UploadTime", "Status"]


class LedgerEntry(BaseModel):
    """One audit ledger row"""
    model_config = ConfigDict(frozen=True)

    file_name: str
    file_path: str
    size: str
    upload_time: str
    status: LedgerStatus

    def to_row(self) -> dict:
        """Return the row keyed by ledger column name"""
        return {
            "FileName": self.file_name,
            "FilePath": self.file_path,
            "Size": self.size,
            "UploadTime": self.upload_time,
            "Status": self.status.value,
        }

    @classmethod
    def from_row(cls, row: dict) -> "LedgerEntry":
        return cls(
            file_name=row["FileName"],
            file_path=row["FilePath"],
            size=row["Size"],
            upload_time=row["UploadTime"],
            status=LedgerStatus(row["Status"]),
        )


# ============================================================================
# Grouping
# ============================================================================

@dataclass(frozen=True)
class EndpointGroup:
    """All inventory records served by one SharePoint site"""
    address: str
    records: Tuple[FileRecord, ...]

    def __len__(self) -> int:
        return len(self.records)


# ============================================================================
# Stage results
# ============================================================================

@dataclass
class SessionOpened:
    """A live authenticated session for one endpoint"""
    address: str
    session: Any


@dataclass
class SessionFailed:
    """Endpoint could not be opened; the whole group is skipped"""
    address: str
    error: str


SessionResult = Union[SessionOpened, SessionFailed]


class TransferOutcome(str, Enum):
    UPLOADED = "uploaded"
    UPLOAD_FAILED = "upload_failed"
    DOWNLOAD_FAILED = "download_failed"


@dataclass
class TransferResult:
    """Outcome of one download -> upload -> ledger -> cleanup attempt"""
    record: FileRecord
    outcome: TransferOutcome
    local_path: Optional[str] = None
    blob_name: Optional[str] = None
    blob_url: Optional[str] = None
    error: Optional[str] = None
    ledger_entry: Optional[LedgerEntry] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == TransferOutcome.UPLOADED


@dataclass
class RunSummary:
    """Counters and warnings collected over one pipeline run"""
    total_records: int = 0
    groups: int = 0
    sessions_opened: int = 0
    sessions_failed: int = 0
    transfers_attempted: int = 0
    uploaded: int = 0
    upload_failed: int = 0
    download_failed: int = 0
    errored: int = 0
    skipped_records: int = 0
    warnings: List[str] = field(default_factory=list)
    results: List[TransferResult] = field(default_factory=list)

    def record(self, result: TransferResult) -> None:
        self.results.append(result)
        if result.outcome == TransferOutcome.UPLOADED:
            self.uploaded += 1
        elif result.outcome == TransferOutcome.UPLOAD_FAILED:
            self.upload_failed += 1
        else:
            self.download_failed += 1

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def to_dict(self) -> dict:
        return {
            "total_records": self.total_records,
            "groups": self.groups,
            "sessions_opened": self.sessions_opened,
            "sessions_failed": self.sessions_failed,
            "transfers_attempted": self.transfers_attempted,
            "uploaded": self.uploaded,
            "upload_failed": self.upload_failed,
            "download_failed": self.download_failed,
            "errored": self.errored,
            "skipped_records": self.skipped_records,
            "warnings": len(self.warnings),
        }
