"""Output tree: files addressed by their local path under one root."""

from pathlib import Path
from typing import Union


class OutsideOutputError(ValueError):
    """A local path would resolve to a location outside the output root."""


class OutputTree:
    """Writes pages and assets beneath the output root.

    Filesystem errors are not caught here; they abort the run.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def path_for(self, local_path: str) -> Path:
        """Return the file path for local_path, refusing anything outside the root."""
        root = self.root.resolve()
        path = (root / local_path).resolve()
        if path == root or root not in path.parents:
            raise OutsideOutputError(f'{local_path!r} is outside {self.root}')
        return path

    def ensure_parent(self, local_path: str) -> Path:
        """Create the directory that will hold local_path."""
        path = self.path_for(local_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def write_bytes(self, local_path: str, data: bytes) -> Path:
        """Write a downloaded asset, creating parent directories as needed."""
        path = self.ensure_parent(local_path)
        path.write_bytes(data)
        return path

    def write_text(self, local_path: str, text: str) -> Path:
        """Write a page as UTF-8, creating parent directories as needed."""
        path = self.ensure_parent(local_path)
        path.write_text(text, encoding='utf-8')
        return path
