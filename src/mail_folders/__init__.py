"""Mail Folders - a local folder store for email records.

This package organizes messages into an Inbox, a Trash and uniquely named
user folders, with move/delete/trash semantics, per-folder sorting and
whole-mailbox JSON snapshots.
"""

__version__ = "0.1.0"

from mail_folders.config import Settings, get_settings
from mail_folders.mailbox import INBOX_NAME, TRASH_NAME, Mailbox
from mail_folders.models import Folder, Message, SortOrder
from mail_folders.store import LoadResult, SnapshotStore

__all__ = [
    "Folder",
    "INBOX_NAME",
    "LoadResult",
    "Mailbox",
    "Message",
    "Settings",
    "SnapshotStore",
    "SortOrder",
    "TRASH_NAME",
    "get_settings",
    "__version__",
]
