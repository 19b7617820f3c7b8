"""Persisted snapshot models.

These Pydantic models describe the JSON document written by the snapshot
store. They mirror the in-memory graph one-to-one: every folder with its
sort order tag and ordered messages, every message with its full field set.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mail_folders.models.folder import SortOrder
from mail_folders.models.message import utc_now

SNAPSHOT_VERSION = 1


class MessageSnapshot(BaseModel):
    """Serialized form of a single message."""

    model_config = ConfigDict(extra="forbid")

    to: str = Field(default="", description="Recipient list")
    cc: str = Field(default="", description="Carbon copy list")
    bcc: str = Field(default="", description="Blind carbon copy list")
    subject: str = Field(default="", description="Subject line")
    body: str = Field(default="", description="Message text")
    created_at: datetime = Field(description="Creation timestamp")


class FolderSnapshot(BaseModel):
    """Serialized form of a folder and its ordered messages."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, description="Folder name")
    sort_order: SortOrder = Field(
        default=SortOrder.DATE_DESCENDING,
        description="Last sort applied to the folder",
    )
    messages: list[MessageSnapshot] = Field(
        default_factory=list,
        description="Messages in folder order",
    )


class MailboxSnapshot(BaseModel):
    """Whole-mailbox snapshot written on every save."""

    model_config = ConfigDict(extra="forbid")

    version: int = Field(default=SNAPSHOT_VERSION, description="Snapshot format version")
    saved_at: datetime = Field(default_factory=utc_now, description="When the snapshot was taken")
    inbox: FolderSnapshot = Field(description="Reserved Inbox folder")
    trash: FolderSnapshot = Field(description="Reserved Trash folder")
    folders: list[FolderSnapshot] = Field(
        default_factory=list,
        description="User folders in registration order",
    )

    @field_validator("version")
    @classmethod
    def _check_version(cls, v: int) -> int:
        if v != SNAPSHOT_VERSION:
            raise ValueError(f"Unsupported snapshot version {v}; expected {SNAPSHOT_VERSION}")
        return v
