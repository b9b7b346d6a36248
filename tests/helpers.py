"""
Shared test doubles.
"""

from pathlib import Path
from typing import Dict, List, Union

from gitdigest.core.exceptions import FetchError


def write_tree(root: Path, files: Dict[str, Union[str, bytes]]) -> None:
    """Create ``files`` (relative path -> content) under ``root``."""
    for relative_path, content in files.items():
        path = Path(root) / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_bytes(content.encode("utf-8"))


class FakeFetcher:
    """Materialises a fixed file tree instead of cloning."""

    def __init__(self, files: Dict[str, Union[str, bytes]]):
        self.files = files
        self.destinations: List[Path] = []
        self.sources = []

    def fetch(self, source, destination: Path) -> Path:
        self.sources.append(source)
        self.destinations.append(Path(destination))
        write_tree(destination, self.files)
        return destination


class FailingFetcher(FakeFetcher):
    """Writes part of a tree, then fails like a broken clone."""

    def fetch(self, source, destination: Path) -> Path:
        super().fetch(source, destination)
        raise FetchError("Git clone failed", details={"stderr": "fatal: repository not found"})


def code(size: int, line: str = "const value = 1;\n") -> str:
    """ASCII source text of exactly ``size`` bytes."""
    text = line * (size // len(line) + 1)
    return text[:size]
