"""Mailbox: the root registry of folders.

The mailbox owns the two reserved folders (Inbox and Trash) plus any number
of uniquely named user folders, and performs every operation that touches
more than one folder: compose, move, delete-to-trash and empty-trash.

A Mailbox is an ordinary object. The application creates (or loads) one per
session and passes it to whatever needs it; see ``SnapshotStore.session``.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from mail_folders.exceptions import (
    DuplicateFolderError,
    FolderNotFoundError,
    InvalidFolderNameError,
    MessageNotFoundError,
    ReservedFolderError,
)
from mail_folders.models import (
    Folder,
    FolderSnapshot,
    MailboxSnapshot,
    Message,
    MessageSnapshot,
)

logger = structlog.get_logger()

INBOX_NAME = "Inbox"
TRASH_NAME = "Trash"


def _fold(name: str) -> str:
    return name.strip().casefold()


_RESERVED = frozenset({_fold(INBOX_NAME), _fold(TRASH_NAME)})


def is_reserved_name(name: str) -> bool:
    """Return True if ``name`` refers to Inbox or Trash, in any case."""
    return _fold(name) in _RESERVED


class Mailbox:
    """Registry of the Inbox, the Trash and the user folders.

    Every public operation runs under a single re-entrant lock so a move is
    never observed half done. Callers that read and then mutate (for example
    pick a message by index, then delete it) from more than one thread should
    wrap the sequence in ``locked()``.
    """

    def __init__(self) -> None:
        self._inbox = Folder(INBOX_NAME)
        self._trash = Folder(TRASH_NAME)
        self._folders: list[Folder] = []
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Folder access
    # -------------------------------------------------------------------------

    @property
    def inbox(self) -> Folder:
        return self._inbox

    @property
    def trash(self) -> Folder:
        return self._trash

    @property
    def user_folders(self) -> tuple[Folder, ...]:
        """User folders in registration order."""
        with self._lock:
            return tuple(self._folders)

    @property
    def folders(self) -> tuple[Folder, ...]:
        """Inbox, Trash, then user folders in registration order."""
        with self._lock:
            return (self._inbox, self._trash, *self._folders)

    def folder_names(self) -> list[str]:
        return [folder.name for folder in self.folders]

    def message_count(self) -> int:
        """Total number of messages across all folders."""
        with self._lock:
            return sum(len(folder) for folder in self.folders)

    @contextmanager
    def locked(self) -> Iterator[Mailbox]:
        """Hold exclusive access to the mailbox for a sequence of calls."""
        with self._lock:
            yield self

    def get_folder(self, name: str) -> Folder | None:
        """Case-insensitive lookup across Inbox, Trash and user folders.

        Returns:
            The matching folder, or None if there is none.
        """
        key = _fold(name)
        with self._lock:
            for folder in self.folders:
                if _fold(folder.name) == key:
                    return folder
        return None

    def require_folder(self, name: str) -> Folder:
        """Like ``get_folder`` but raises FolderNotFoundError when absent."""
        folder = self.get_folder(name)
        if folder is None:
            raise FolderNotFoundError(f"Folder {name!r} not found")
        return folder

    def find_folder(self, message: Message) -> Folder | None:
        """Return the folder holding ``message``.

        Folders are scanned in the order Inbox, Trash, then user folders.
        """
        with self._lock:
            for folder in self.folders:
                if message in folder:
                    return folder
        return None

    # -------------------------------------------------------------------------
    # Folder management
    # -------------------------------------------------------------------------

    def add_folder(self, name: str) -> Folder:
        """Register a new empty user folder.

        Args:
            name: Folder name. Surrounding whitespace is dropped.

        Returns:
            The new folder.

        Raises:
            InvalidFolderNameError: If the name is blank.
            DuplicateFolderError: If any folder, Inbox and Trash included,
                already uses the name (case-insensitive).
        """
        folder = self._register(name)
        logger.info("folder_added", folder=folder.name)
        return folder

    def remove_folder(self, name: str, *, keep_messages: bool = False) -> Folder:
        """Unregister a user folder.

        The folder's messages are discarded along with it unless
        ``keep_messages`` is set, in which case they are appended to the
        Inbox in their folder order first.

        Returns:
            The removed folder.

        Raises:
            ReservedFolderError: For Inbox or Trash.
            FolderNotFoundError: If no user folder has that name.
        """
        if is_reserved_name(name):
            raise ReservedFolderError(f"The {name.strip()} folder cannot be removed")

        with self._lock:
            folder = self.require_folder(name)
            self._folders.remove(folder)
            moved = 0
            if keep_messages:
                for message in folder.messages:
                    self._inbox.add(message)
                moved = folder.clear()

        logger.info(
            "folder_removed",
            folder=folder.name,
            discarded=len(folder),
            moved_to_inbox=moved,
        )
        return folder

    def rename_folder(self, name: str, new_name: str) -> Folder:
        """Rename a user folder.

        Raises:
            ReservedFolderError: If either name is Inbox or Trash.
            FolderNotFoundError: If no user folder has ``name``.
            InvalidFolderNameError: If ``new_name`` is blank.
            DuplicateFolderError: If another folder already uses ``new_name``.
        """
        if is_reserved_name(name):
            raise ReservedFolderError(f"The {name.strip()} folder cannot be renamed")
        clean = self._validate_name(new_name)

        with self._lock:
            folder = self.require_folder(name)
            if _fold(clean) != _fold(folder.name):
                self._check_available(clean)
            old_name = folder.name
            folder._rename(clean)

        logger.info("folder_renamed", old_name=old_name, new_name=clean)
        return folder

    # -------------------------------------------------------------------------
    # Message operations
    # -------------------------------------------------------------------------

    def compose(
        self,
        to: str = "",
        cc: str = "",
        bcc: str = "",
        subject: str = "",
        body: str = "",
    ) -> Message:
        """Create a message stamped with the current time and add it to Inbox."""
        message = Message(to=to, cc=cc, bcc=bcc, subject=subject, body=body)
        with self._lock:
            self._inbox.add(message)

        logger.info("message_composed", subject=subject, inbox_size=len(self._inbox))
        return message

    def delete(self, message: Message) -> Folder:
        """Move ``message`` to the end of Trash.

        A message that is already in Trash stays where it is.

        Returns:
            The Trash folder.

        Raises:
            MessageNotFoundError: If no folder holds the message.
        """
        with self._lock:
            source = self._require_source(message)
            if source is self._trash:
                logger.debug("message_already_in_trash", subject=message.subject)
                return self._trash
            self._transfer(message, source, self._trash)

        logger.info("message_deleted", subject=message.subject, source=source.name)
        return self._trash

    def move(self, message: Message, target: Folder | str) -> Folder:
        """Move ``message`` to the end of ``target``.

        The target's sort order is not applied. Moving a message into the
        folder that already holds it re-appends it at the end.

        Args:
            message: Message held by one of this mailbox's folders.
            target: A folder of this mailbox, or a folder name.

        Returns:
            The target folder.

        Raises:
            FolderNotFoundError: If the target is not part of this mailbox.
            MessageNotFoundError: If no folder holds the message.
        """
        with self._lock:
            destination = self._resolve_target(target)
            source = self._require_source(message)
            self._transfer(message, source, destination)

        logger.info(
            "message_moved",
            subject=message.subject,
            source=source.name,
            target=destination.name,
        )
        return destination

    def empty_trash(self) -> int:
        """Discard everything in Trash.

        Returns:
            Number of messages discarded (0 if Trash was already empty).
        """
        with self._lock:
            cleared = self._trash.clear()

        logger.info("trash_emptied", cleared=cleared)
        return cleared

    # -------------------------------------------------------------------------
    # Snapshot conversion
    # -------------------------------------------------------------------------

    def to_snapshot(self) -> MailboxSnapshot:
        """Capture the whole mailbox as a snapshot model."""
        with self._lock:
            return MailboxSnapshot(
                inbox=_folder_to_snapshot(self._inbox),
                trash=_folder_to_snapshot(self._trash),
                folders=[_folder_to_snapshot(f) for f in self._folders],
            )

    @classmethod
    def from_snapshot(cls, snapshot: MailboxSnapshot) -> Mailbox:
        """Rebuild a mailbox from a snapshot model.

        User folders are registered through the same rules as ``add_folder``,
        so a snapshot with duplicate or reserved user folder names is
        rejected, as is one whose reserved folders carry other names.

        Raises:
            ReservedFolderError: If the inbox or trash entry is misnamed.
            DuplicateFolderError: If two folders share a name.
            InvalidFolderNameError: If a user folder name is blank.
        """
        for reserved, expected in ((snapshot.inbox, INBOX_NAME), (snapshot.trash, TRASH_NAME)):
            if _fold(reserved.name) != _fold(expected):
                raise ReservedFolderError(
                    f"Expected the {expected} folder, found {reserved.name!r}"
                )

        mailbox = cls()
        _fill_folder(mailbox.inbox, snapshot.inbox)
        _fill_folder(mailbox.trash, snapshot.trash)
        for folder_snapshot in snapshot.folders:
            folder = mailbox._register(folder_snapshot.name)
            _fill_folder(folder, folder_snapshot)
        return mailbox

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _register(self, name: str) -> Folder:
        clean = self._validate_name(name)
        with self._lock:
            self._check_available(clean)
            folder = Folder(clean)
            self._folders.append(folder)
        return folder

    def _validate_name(self, name: str) -> str:
        clean = name.strip()
        if not clean:
            raise InvalidFolderNameError("Folder name must not be blank")
        return clean

    def _check_available(self, name: str) -> None:
        if is_reserved_name(name):
            raise DuplicateFolderError(f"{name!r} is a reserved folder name")
        if self.get_folder(name) is not None:
            raise DuplicateFolderError(f"Folder {name!r} already exists")

    def _resolve_target(self, target: Folder | str) -> Folder:
        if isinstance(target, str):
            return self.require_folder(target)
        if any(folder is target for folder in self.folders):
            return target
        raise FolderNotFoundError(f"Folder {target.name!r} does not belong to this mailbox")

    def _require_source(self, message: Message) -> Folder:
        source = self.find_folder(message)
        if source is None:
            raise MessageNotFoundError(f"Message {message.subject!r} not found in any folder")
        return source

    def _transfer(self, message: Message, source: Folder, destination: Folder) -> None:
        index = source.index_of(message)
        if index is None:
            raise MessageNotFoundError(f"Message {message.subject!r} not found in {source.name!r}")
        destination.add(source.remove_at(index))

    def __repr__(self) -> str:
        return f"Mailbox(folders={self.folder_names()!r}, messages={self.message_count()})"


def _folder_to_snapshot(folder: Folder) -> FolderSnapshot:
    return FolderSnapshot(
        name=folder.name,
        sort_order=folder.sort_order,
        messages=[
            MessageSnapshot(
                to=m.to,
                cc=m.cc,
                bcc=m.bcc,
                subject=m.subject,
                body=m.body,
                created_at=m.created_at,
            )
            for m in folder.messages
        ],
    )


def _fill_folder(folder: Folder, snapshot: FolderSnapshot) -> None:
    for m in snapshot.messages:
        folder.add(
            Message(
                to=m.to,
                cc=m.cc,
                bcc=m.bcc,
                subject=m.subject,
                body=m.body,
                created_at=m.created_at,
            )
        )
    folder.sort_order = snapshot.sort_order
