"""Data records shared by the scanning, grouping and moving code."""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Tuple


class MediaType(str, enum.Enum):
    """Coarse file category decided from the extension."""

    VIDEO = "video"
    IMAGE = "image"
    DOCUMENT = "document"
    AUDIO = "audio"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class FileMeta:
    """Metadata captured for one file during a scan."""

    full_path: Path
    file_name: str
    ext: str  # lowercased, with the leading dot
    mod_time: datetime


@dataclass(frozen=True)
class SimilarityGroup:
    """Two or more images with identical fingerprints."""

    group_id: int
    members: Tuple[Path, ...]

    def __len__(self) -> int:
        return len(self.members)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group_id": self.group_id,
            "members": [str(member) for member in self.members],
        }


@dataclass(frozen=True)
class MoveRecord:
    """A completed move that can be reversed."""

    source_path: Path
    target_path: Path
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class ShortcutConfig:
    """
    Binds a single key to a destination folder.

    ``target_dir`` is either absolute or relative to the directory of the
    file being moved. An empty ``target_dir`` means the key is not set up.
    """

    key: str
    target_dir: str = ""
    label: str = ""

    def __post_init__(self) -> None:
        if len(self.key) != 1 or not self.key.isalnum():
            raise ValueError(
                f"Shortcut key must be a single letter or digit, got {self.key!r}"
            )

    def matches(self, key: str) -> bool:
        return self.key.lower() == key.lower()

    def to_dict(self) -> Dict[str, str]:
        return {"key": self.key, "targetDir": self.target_dir, "label": self.label}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShortcutConfig":
        return cls(
            key=str(data["key"]),
            target_dir=str(data.get("targetDir", data.get("target_dir", "")) or ""),
            label=str(data.get("label", "")),
        )
