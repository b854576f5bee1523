"""Data models for WD Bridge (wdbridge)."""

from dataclasses import dataclass
from typing import Optional, Dict, Any

from wdbridge.core.config import DIRECTORY_MIME_TYPE


@dataclass(frozen=True)
class RemoteEntry:
    """Represents a file or folder on the cloud device."""

    id: str
    name: str
    is_dir: bool

    @classmethod
    def from_api_response(cls, item: Dict[str, Any]) -> "RemoteEntry":
        """Create a RemoteEntry from a filesSearch result item."""
        return cls(
            id=item["id"],
            name=item["name"],
            is_dir=item.get("mimeType") == DIRECTORY_MIME_TYPE,
        )


@dataclass(frozen=True)
class TransferProgress:
    """Byte offset reached by a transfer out of its total size."""

    offset: int
    total: int

    @property
    def percentage(self) -> float:
        # Empty files are complete as soon as they start
        if self.total == 0:
            return 100.0
        return self.offset * 100 / self.total


@dataclass
class TransferResult:
    """Terminal status of one file in a tree transfer."""

    name: str
    path: str
    success: bool
    error: Optional[BaseException] = None
