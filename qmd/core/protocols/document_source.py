"""Document source protocol for dependency injection."""
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class DocumentSourceProtocol(Protocol):
    """Protocol for the tree of files being indexed."""

    @property
    def root(self) -> Path:
        ...

    def exists(self) -> bool:
        """Whether the root directory is present."""
        ...

    def list_paths(self) -> list[str]:
        """Eligible files as sorted POSIX paths relative to the root."""
        ...

    def read(self, relative_path: str) -> str:
        """Read a file's full text.

        Raises:
            OSError: If the file cannot be read.
            UnicodeDecodeError: If the file is not valid UTF-8.
        """
        ...

    def read_optional(self, relative_path: str) -> Optional[str]:
        """Read a file, or None if it is missing or outside the root."""
        ...
