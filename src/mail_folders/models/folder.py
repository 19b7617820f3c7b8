"""Folder model: a named, ordered container of messages."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import Enum
from operator import attrgetter

from mail_folders.exceptions import IndexOutOfRangeError
from mail_folders.models.message import Message


class SortOrder(str, Enum):
    """Last sort applied to a folder."""

    SUBJECT_ASCENDING = "subject_ascending"
    SUBJECT_DESCENDING = "subject_descending"
    DATE_ASCENDING = "date_ascending"
    DATE_DESCENDING = "date_descending"

    @property
    def ascending(self) -> bool:
        return self in (SortOrder.SUBJECT_ASCENDING, SortOrder.DATE_ASCENDING)

    @property
    def by_subject(self) -> bool:
        return self in (SortOrder.SUBJECT_ASCENDING, SortOrder.SUBJECT_DESCENDING)


class Folder:
    """Ordered container of messages.

    ``sort_order`` only records the last sort applied. Messages added
    afterwards are appended to the end and the sequence is not re-sorted;
    callers that need the order restored call one of the sort methods again.

    Folders handed out by a Mailbox are live handles: mutating them (for
    example through ``remove_at``) changes mailbox state directly.
    """

    def __init__(
        self,
        name: str,
        messages: Iterable[Message] = (),
        sort_order: SortOrder = SortOrder.DATE_DESCENDING,
    ) -> None:
        self._name = name
        self._messages: list[Message] = list(messages)
        self._sort_order = SortOrder(sort_order)

    @property
    def name(self) -> str:
        return self._name

    @property
    def sort_order(self) -> SortOrder:
        """Last sort applied to the folder."""
        return self._sort_order

    @sort_order.setter
    def sort_order(self, value: SortOrder | str) -> None:
        # Raises ValueError for anything that is not a SortOrder value.
        self._sort_order = SortOrder(value)

    @property
    def messages(self) -> tuple[Message, ...]:
        """Messages in their current order (read-only view)."""
        return tuple(self._messages)

    def add(self, message: Message) -> None:
        """Append a message to the end of the folder."""
        self._messages.append(message)

    def get(self, index: int) -> Message:
        """Return the message at ``index`` without removing it.

        Raises:
            IndexOutOfRangeError: If ``index`` is negative or past the end.
        """
        self._check_index(index)
        return self._messages[index]

    def remove_at(self, index: int) -> Message:
        """Remove and return the message at ``index``.

        Later messages shift down by one.

        Raises:
            IndexOutOfRangeError: If ``index`` is negative or past the end.
        """
        self._check_index(index)
        return self._messages.pop(index)

    def index_of(self, message: Message) -> int | None:
        """Position of ``message`` (by identity), or None if not held here."""
        for i, m in enumerate(self._messages):
            if m is message:
                return i
        return None

    def contains(self, message: Message) -> bool:
        return self.index_of(message) is not None

    def clear(self) -> int:
        """Discard every message and return how many there were."""
        count = len(self._messages)
        self._messages.clear()
        return count

    # -------------------------------------------------------------------------
    # Sorting
    # -------------------------------------------------------------------------

    def sort_by_subject(self, ascending: bool = True) -> None:
        """Stable lexicographic sort on subject."""
        # list.sort stays stable with reverse=True: ties keep prior order.
        self._messages.sort(key=attrgetter("subject"), reverse=not ascending)
        self.sort_order = SortOrder.SUBJECT_ASCENDING if ascending else SortOrder.SUBJECT_DESCENDING

    def sort_by_date(self, ascending: bool = True) -> None:
        """Stable chronological sort on created_at."""
        self._messages.sort(key=attrgetter("created_at"), reverse=not ascending)
        self.sort_order = SortOrder.DATE_ASCENDING if ascending else SortOrder.DATE_DESCENDING

    def sort(self, order: SortOrder) -> None:
        order = SortOrder(order)
        if order.by_subject:
            self.sort_by_subject(order.ascending)
        else:
            self.sort_by_date(order.ascending)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _rename(self, name: str) -> None:
        # Only the owning Mailbox renames folders, after checking uniqueness.
        self._name = name

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self._messages):
            raise IndexOutOfRangeError(
                f"Index {index} is out of range for folder {self._name!r} "
                f"({len(self._messages)} message(s))"
            )

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def __contains__(self, message: object) -> bool:
        return any(m is message for m in self._messages)

    def __str__(self) -> str:
        return f"{self._name} ({len(self._messages)})"

    def __repr__(self) -> str:
        return (
            f"Folder(name={self._name!r}, messages={len(self._messages)}, "
            f"sort_order={self.sort_order.value})"
        )
