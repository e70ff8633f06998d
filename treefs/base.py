"""Node payloads and info records for the virtual filesystem.

A tree node carries one of two payloads, decided when the node is created:
``DirectoryData`` or ``FileData``. Commands dispatch on ``data.kind``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone


def _now_iso() -> str:
    """Get current UTC timestamp as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


class NodeKind(str, enum.Enum):
    """Kind of a filesystem node."""

    DIRECTORY = "directory"
    FILE = "file"


@dataclass
class DirectoryData:
    """Payload of a directory node.

    Attributes:
        created_at: ISO 8601 timestamp when the directory was created (UTC).
    """

    created_at: str = field(default_factory=_now_iso)
    kind: NodeKind = field(default=NodeKind.DIRECTORY, init=False)


@dataclass
class FileData:
    """Payload of a file node.

    Attributes:
        contents: File text.
        size: Byte length of ``contents`` in the filesystem encoding.
        created_at: ISO 8601 timestamp when the file was created (UTC).
        last_modified: ISO 8601 timestamp of the last write (UTC).
    """

    contents: str = ""
    size: int = 0
    created_at: str = field(default_factory=_now_iso)
    last_modified: str = ""
    kind: NodeKind = field(default=NodeKind.FILE, init=False)

    def __post_init__(self) -> None:
        if not self.last_modified:
            self.last_modified = self.created_at


NodeData = DirectoryData | FileData


@dataclass
class NodeInfo:
    """Complete node information for display.

    Attributes:
        name: File or directory name (basename).
        path: Absolute path of the node.
        kind: Directory or file.
        size: Size in bytes (0 for directories).
        created_at: ISO 8601 timestamp when created (UTC).
        modified_at: ISO 8601 timestamp when last modified (UTC).
    """

    name: str
    path: str
    kind: NodeKind
    size: int
    created_at: str
    modified_at: str

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIRECTORY
