"""Pydantic models for templates, themes and sync results."""

from pydantic import BaseModel, Field


class Record(BaseModel):
    """Represents a template row in the record store."""

    name: str = Field(default=..., min_length=1, description="Template title, unique within a set")
    group_id: int = Field(default=..., description="Templateset id the template belongs to")
    body: str = Field(default="", description="Template source")
    version: str = Field(default="", description="Application version code the row was written by")
    created_at: int = Field(default=0, description="Unix timestamp of the row's creation")

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "header",
                "group_id": 3,
                "body": "<div id=\"header\">{$mybb->settings['bbname']}</div>",
                "version": "1839",
                "created_at": 1718000000,
            }
        }
    }


class GroupRef(BaseModel):
    """A theme resolved to the templateset id its templates live in."""

    name: str = Field(default=..., description="Theme name")
    group_id: int = Field(default=..., description="Resolved templateset id")


class DownloadReport(BaseModel):
    """Result of reconciling one templateset into the local folder."""

    group_id: int = Field(default=..., description="Templateset id that was reconciled")
    downloaded: list[str] = Field(
        default_factory=list, description="Templates written as new local files"
    )
    updated: list[str] = Field(
        default_factory=list, description="Local files overwritten with changed remote content"
    )
    unchanged: list[str] = Field(
        default_factory=list, description="Templates whose local content already matched"
    )
    preserved: list[str] = Field(
        default_factory=list,
        description="Local files that differ from the remote copy but were left untouched",
    )

    @property
    def files_written(self) -> int:
        """Number of local files created or overwritten."""
        return len(self.downloaded) + len(self.updated)


class UploadReport(BaseModel):
    """Result of pushing local files to a templateset."""

    group: GroupRef
    inserted: list[str] = Field(default_factory=list, description="Templates inserted as new rows")
    updated: list[str] = Field(default_factory=list, description="Existing rows whose body was replaced")
    skipped: list[str] = Field(
        default_factory=list, description="Files unchanged since the last sync"
    )
    missing: list[str] = Field(
        default_factory=list, description="Requested names without a local file"
    )

    @property
    def records_written(self) -> int:
        """Number of store writes issued."""
        return len(self.inserted) + len(self.updated)
