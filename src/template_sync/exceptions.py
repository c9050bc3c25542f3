"""Error taxonomy for template synchronization."""

from pathlib import Path


class TemplateSyncError(Exception):
    """Base class for all synchronization errors."""


class GroupNotFound(TemplateSyncError):
    """Raised when no theme matches the requested name."""

    def __init__(self, group_name: str):
        self.group_name = group_name
        super().__init__(f"No theme found with name '{group_name}'.")


class InvalidGroup(TemplateSyncError):
    """Raised when a theme exists but carries no usable templateset id."""

    def __init__(self, group_name: str):
        self.group_name = group_name
        super().__init__(f"Templateset not found in properties of theme '{group_name}'.")


class LedgerCorrupt(TemplateSyncError):
    """Raised when the persisted modification ledger cannot be parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Modification ledger {path} is corrupt: {reason}")


class InvalidRecordName(TemplateSyncError):
    """Raised when a record name cannot be mapped to a local file."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Record name {name!r} cannot be used as a file name.")


class ConfigurationError(TemplateSyncError):
    """Raised when configuration is invalid or missing."""


class InvalidRecord(TemplateSyncError):
    """Raised when a stored row cannot be read as a template record."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Template row {name!r} is invalid: {reason}")
