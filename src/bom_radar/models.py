# models.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

@dataclass(frozen=True)
class Subject:
    """A radar or satellite product the bot knows about"""
    id: str
    name: str

@dataclass(frozen=True)
class RemoteFrame:
    """A single timestamped frame on the BOM FTP server"""
    path: str
    basename: str
    timestamp: datetime

@dataclass(frozen=True)
class StoredObject:
    """A listed entry in object storage"""
    key: str
    size: int = 0
    last_modified: Optional[datetime] = None

class CacheMode(Enum):
    PASSTHROUGH = "passthrough"
    TRANSFORM = "transform"

@dataclass(frozen=True)
class CachePolicy:
    """Where and how fetched frames are cached"""
    prefix: str
    content_type: str
    mode: CacheMode = CacheMode.PASSTHROUGH

@dataclass(frozen=True)
class TimelapseArtifact:
    """An uploaded timelapse gif"""
    subject_id: str
    generation_key: str
    path: str
    url: str
    data: bytes = field(repr=False)
    reused: bool = False

@dataclass
class JanitorReport:
    """Result of a cache sweep"""
    scanned: int = 0
    deleted: int = 0
    skipped: int = 0
    failed: int = 0

    def merge(self, other: "JanitorReport") -> "JanitorReport":
        return JanitorReport(
            scanned=self.scanned + other.scanned,
            deleted=self.deleted + other.deleted,
            skipped=self.skipped + other.skipped,
            failed=self.failed + other.failed,
        )

    def __str__(self) -> str:
        return (
            f"Cleanup complete: {self.deleted}/{self.scanned} deleted, "
            f"{self.skipped} skipped, {self.failed} failed"
        )

@dataclass
class CycleReport:
    """Result of one refresh cycle"""
    succeeded: int = 0
    failures: List[str] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    @property
    def ok(self) -> bool:
        return not self.failures

    def __str__(self) -> str:
        return (
            f"Refresh complete: {self.succeeded}/{self.total} units successful, "
            f"{self.failed} failed ({self.duration_ms}ms)"
        )
