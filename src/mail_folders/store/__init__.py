"""Mailbox persistence.

The whole mailbox is snapshotted to a single JSON file on every save and
read back wholesale on load; there is no incremental format.
"""

from .snapshot_store import LoadResult, SnapshotStore

__all__ = ["LoadResult", "SnapshotStore"]
