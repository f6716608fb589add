import logging
from pathlib import Path
from typing import Optional

from .text_loader import TextLoader

logger = logging.getLogger(__name__)


class FileSystemSource:
    """Knowledge base files under a root directory, addressed by relative path."""

    def __init__(
        self,
        root: str | Path,
        pattern: str = "**/*.md",
        loader: Optional[TextLoader] = None,
    ):
        """Initialize source.

        Args:
            root: Knowledge base root directory.
            pattern: Glob pattern for eligible files, relative to root.
            loader: Text loader.
        """
        self._root = Path(root)
        self._pattern = pattern
        self._loader = loader or TextLoader()

    @property
    def root(self) -> Path:
        return self._root

    def exists(self) -> bool:
        return self._root.is_dir()

    def list_paths(self) -> list[str]:
        if not self.exists():
            return []

        paths = [
            p.relative_to(self._root).as_posix()
            for p in self._root.glob(self._pattern)
            if p.is_file() and self._loader.supports(p)
        ]
        return sorted(paths)

    def read(self, relative_path: str) -> str:
        return self._loader.load(self._resolve(relative_path))

    def read_optional(self, relative_path: str) -> Optional[str]:
        try:
            file_path = self._resolve(relative_path)
        except ValueError as e:
            logger.warning(f"Rejected path {relative_path}: {e}")
            return None

        if not file_path.is_file():
            return None
        return self._loader.load(file_path)

    def _resolve(self, relative_path: str) -> Path:
        """Map a relative path to a file inside the root.

        Raises:
            ValueError: If the path escapes the root.
        """
        root = self._root.resolve()
        file_path = (root / relative_path).resolve()
        if not file_path.is_relative_to(root):
            raise ValueError(f"{relative_path} is outside {root}")
        return file_path
