"""Media port — storage for files attached to return requests."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class MediaFile:
    """An uploaded attachment: original file name, content type and raw bytes."""

    filename: str
    content: bytes
    content_type: str | None = None


class MediaStore(ABC):
    @abstractmethod
    def save(self, files: list[MediaFile]) -> list[str]:
        """Persist ``files`` and return one opaque storage reference per file."""
        ...

    @abstractmethod
    def discard(self, refs: list[str]) -> None:
        """Remove previously saved files. Unknown references are ignored."""
        ...
