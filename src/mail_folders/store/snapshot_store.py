"""JSON snapshot store for a Mailbox.

Saves are atomic: the snapshot is written to a temporary file next to the
target and moved into place, so a failed save never leaves a truncated
snapshot behind and never touches the live mailbox.

A snapshot that exists but cannot be loaded is moved aside before a fresh
mailbox is handed out, so the next save cannot overwrite it.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import structlog
from pydantic import ValidationError

from mail_folders.exceptions import MailFoldersError, PersistenceLoadError, PersistenceSaveError
from mail_folders.mailbox import Mailbox
from mail_folders.models import MailboxSnapshot

logger = structlog.get_logger()


@dataclass(frozen=True)
class LoadResult:
    """Outcome of ``SnapshotStore.load_or_create``."""

    mailbox: Mailbox
    created: bool
    warning: str | None = None
    backup_path: Path | None = None


class SnapshotStore:
    """Reads and writes whole-mailbox snapshots at a fixed path."""

    def __init__(self, path: Path, indent: int | None = 2) -> None:
        """Create a store.

        Args:
            path: Path to the JSON snapshot file.
            indent: JSON indentation, or None for compact output.
        """

        self._path = Path(path)
        self._indent = indent
        # Set when an unreadable snapshot could not be moved aside.
        self._guarded = False

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> Mailbox:
        """Load the mailbox from the snapshot file.

        Raises:
            PersistenceLoadError: If the file is missing, unreadable, not a
                valid snapshot, or describes an inconsistent mailbox.
        """

        if not self.exists():
            raise PersistenceLoadError(f"No mailbox snapshot at {self._path}")

        try:
            raw = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceLoadError(f"Cannot read mailbox snapshot {self._path}: {e}") from e

        try:
            snapshot = MailboxSnapshot.model_validate_json(raw)
        except ValidationError as e:
            raise PersistenceLoadError(
                f"Invalid mailbox snapshot {self._path}: {e.error_count()} error(s)"
            ) from e

        try:
            mailbox = Mailbox.from_snapshot(snapshot)
        except MailFoldersError as e:
            raise PersistenceLoadError(f"Inconsistent mailbox snapshot {self._path}: {e}") from e

        logger.info(
            "mailbox_snapshot_loaded",
            path=str(self._path),
            folders=len(mailbox.folders),
            messages=mailbox.message_count(),
        )
        return mailbox

    def load_or_create(self) -> LoadResult:
        """Load the mailbox, falling back to a fresh one.

        A missing snapshot is a normal first run. Any other load failure is
        reported through ``LoadResult.warning`` and logged; it never raises.
        The unreadable file is renamed to a ``.corrupt-<timestamp>`` backup
        next to it. If even that fails, later saves to this path are refused.
        """

        if not self.exists():
            logger.info("mailbox_snapshot_not_found", path=str(self._path))
            return LoadResult(mailbox=Mailbox(), created=True)

        try:
            return LoadResult(mailbox=self.load(), created=False)
        except PersistenceLoadError as e:
            logger.warning("mailbox_snapshot_load_failed", path=str(self._path), error=str(e))
            load_error = e

        backup = self._backup_path()
        try:
            os.replace(self._path, backup)
        except OSError as e:
            self._guarded = True
            logger.error("mailbox_snapshot_backup_failed", path=str(self._path), error=str(e))
            return LoadResult(
                mailbox=Mailbox(),
                created=True,
                warning=(
                    f"{load_error}; could not move it aside ({e}), so it will not be "
                    "overwritten; starting with an empty mailbox"
                ),
            )

        logger.warning("mailbox_snapshot_moved_aside", path=str(self._path), backup=str(backup))
        return LoadResult(
            mailbox=Mailbox(),
            created=True,
            warning=f"{load_error}; kept as {backup}; starting with an empty mailbox",
            backup_path=backup,
        )

    def save(self, mailbox: Mailbox) -> None:
        """Write the whole mailbox to the snapshot file.

        Raises:
            PersistenceSaveError: If the snapshot cannot be written. The
                previous snapshot file, if any, is left in place.
        """

        if self._guarded:
            raise PersistenceSaveError(
                f"Refusing to overwrite unreadable mailbox snapshot {self._path}; "
                "move or repair it first"
            )

        snapshot = mailbox.to_snapshot()
        payload = snapshot.model_dump_json(indent=self._indent)

        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            logger.error("mailbox_snapshot_save_failed", path=str(self._path), error=str(e))
            raise PersistenceSaveError(f"Cannot save mailbox snapshot {self._path}: {e}") from e

        folders = [snapshot.inbox, snapshot.trash, *snapshot.folders]
        logger.info(
            "mailbox_snapshot_saved",
            path=str(self._path),
            folders=len(folders),
            messages=sum(len(f.messages) for f in folders),
        )

    def _backup_path(self) -> Path:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        return self._path.with_name(f"{self._path.name}.corrupt-{stamp}")

    @contextmanager
    def session(self, autosave: bool = True) -> Iterator[LoadResult]:
        """Load (or create) the mailbox for one session.

        The mailbox is saved when the block exits normally and ``autosave``
        is set. Nothing is saved if the block raises.
        """

        result = self.load_or_create()
        yield result
        if autosave:
            self.save(result.mailbox)
