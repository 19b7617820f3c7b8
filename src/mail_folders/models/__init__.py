"""Data models for Mail Folders.

Messages and folders are plain Python objects held by reference inside a
mailbox; the snapshot models are Pydantic models used only for persistence.
"""

from mail_folders.models.folder import Folder, SortOrder
from mail_folders.models.message import Message
from mail_folders.models.snapshot import (
    SNAPSHOT_VERSION,
    FolderSnapshot,
    MailboxSnapshot,
    MessageSnapshot,
)

__all__ = [
    "Folder",
    "FolderSnapshot",
    "MailboxSnapshot",
    "Message",
    "MessageSnapshot",
    "SNAPSHOT_VERSION",
    "SortOrder",
]
