"""Local template folder access."""

from template_sync.files.local_file_set import LocalFileSet

__all__ = ["LocalFileSet"]
