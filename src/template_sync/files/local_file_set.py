"""One file per template inside a local folder."""

from pathlib import Path

import structlog

from template_sync.exceptions import InvalidRecordName

log = structlog.stdlib.get_logger()

_RESERVED_NAMES = {"", ".", ".."}


class LocalFileSet:
    """Lists, reads and writes template files under a root directory."""

    def __init__(self, root: Path | str, extension: str = ".tpl", encoding: str = "utf-8"):
        """
        Initialize the file set.

        Args:
            root: Directory holding the template files
            extension: File extension of template files, including the dot
            encoding: Text encoding used to turn template bodies into bytes
        """
        self._root = Path(root)
        self._extension = extension
        self._encoding = encoding

    @property
    def root(self) -> Path:
        return self._root

    @property
    def extension(self) -> str:
        return self._extension

    def encode(self, body: str) -> bytes:
        return body.encode(self._encoding)

    def decode(self, data: bytes) -> str:
        return data.decode(self._encoding)

    def path_for(self, name: str) -> Path:
        """
        Map a template name to its file path.

        Raises:
            InvalidRecordName: If the name cannot round-trip through a file name
        """
        if name in _RESERVED_NAMES or "/" in name or "\\" in name or "\x00" in name:
            raise InvalidRecordName(name)
        return self._root / f"{name}{self._extension}"

    def name_for(self, path: Path) -> str:
        """Map a template file path back to the template name."""
        return path.name[: -len(self._extension)]

    def list(self, extension: str | None = None) -> list[Path]:
        """
        List template files in the root directory.

        Args:
            extension: Extension to match; defaults to the file set's extension

        Returns:
            Sorted list of matching file paths (empty if the root is missing)
        """
        extension = extension or self._extension
        if not self._root.is_dir():
            return []

        paths = sorted(
            p
            for p in self._root.iterdir()
            if p.is_file() and p.name.endswith(extension) and len(p.name) > len(extension)
        )
        log.debug("local_files_listed", root=str(self._root), count=len(paths))
        return paths

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def read(self, path: Path) -> bytes:
        return path.read_bytes()

    def write(self, path: Path, data: bytes) -> None:
        """Write ``data`` to ``path``, creating the parent directory if needed."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        log.debug("local_file_written", path=str(path), size=len(data))

    def mtime(self, path: Path) -> int:
        """Modification time of ``path`` in whole seconds."""
        return int(path.stat().st_mtime)
