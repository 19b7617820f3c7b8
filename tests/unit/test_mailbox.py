"""Unit tests for the Mailbox registry."""

import threading

import pytest

from mail_folders.exceptions import (
    DuplicateFolderError,
    FolderNotFoundError,
    InvalidFolderNameError,
    MessageNotFoundError,
    ReservedFolderError,
)
from mail_folders.mailbox import Mailbox, is_reserved_name
from mail_folders.models import Folder


class TestFolderRegistry:
    """Tests for folder creation, lookup, rename and removal."""

    def test_new_mailbox_has_only_reserved_folders(self, mailbox: Mailbox) -> None:
        """Test the initial folder set."""
        assert mailbox.folder_names() == ["Inbox", "Trash"]
        assert mailbox.user_folders == ()
        assert mailbox.message_count() == 0

    @pytest.mark.parametrize("name", ["Work", "Receipts 2024", "ümlaut"])
    def test_add_folder_rejects_case_variants(self, mailbox: Mailbox, name: str) -> None:
        """Test that names are unique case-insensitively."""
        mailbox.add_folder(name)

        with pytest.raises(DuplicateFolderError):
            mailbox.add_folder(name.upper())
        with pytest.raises(DuplicateFolderError):
            mailbox.add_folder(name.lower())
        assert len(mailbox.user_folders) == 1

    @pytest.mark.parametrize("name", ["Inbox", "inbox", "TRASH", "trash", " Inbox "])
    def test_add_folder_rejects_reserved_names(self, mailbox: Mailbox, name: str) -> None:
        """Test that reserved names cannot be used for user folders."""
        with pytest.raises(DuplicateFolderError):
            mailbox.add_folder(name)

    @pytest.mark.parametrize("name", ["", "   ", "\t"])
    def test_add_folder_rejects_blank_names(self, mailbox: Mailbox, name: str) -> None:
        """Test that blank names are refused."""
        with pytest.raises(InvalidFolderNameError):
            mailbox.add_folder(name)

    def test_add_folder_strips_whitespace(self, mailbox: Mailbox) -> None:
        """Test that surrounding whitespace is not part of the name."""
        folder = mailbox.add_folder("  Work ")

        assert folder.name == "Work"
        with pytest.raises(DuplicateFolderError):
            mailbox.add_folder("work")

    def test_get_folder_is_case_insensitive(self, mailbox: Mailbox) -> None:
        """Test lookups across reserved and user folders."""
        work = mailbox.add_folder("Work")

        assert mailbox.get_folder("work") is work
        assert mailbox.get_folder("WORK") is work
        assert mailbox.get_folder("inbox") is mailbox.inbox
        assert mailbox.get_folder("TRASH") is mailbox.trash
        assert mailbox.get_folder("Personal") is None

    def test_require_folder_raises_when_missing(self, mailbox: Mailbox) -> None:
        """Test the raising lookup variant."""
        with pytest.raises(FolderNotFoundError):
            mailbox.require_folder("Nowhere")

    def test_folders_keep_registration_order(self, mailbox: Mailbox) -> None:
        """Test folder enumeration order."""
        mailbox.add_folder("Zeta")
        mailbox.add_folder("Alpha")

        assert mailbox.folder_names() == ["Inbox", "Trash", "Zeta", "Alpha"]

    @pytest.mark.parametrize("name", ["Inbox", "trash", "INBOX", "Trash"])
    def test_remove_reserved_folder_fails(self, mailbox: Mailbox, name: str) -> None:
        """Test that Inbox and Trash can never be removed."""
        with pytest.raises(ReservedFolderError):
            mailbox.remove_folder(name)
        assert mailbox.folder_names() == ["Inbox", "Trash"]

    def test_remove_missing_folder_fails(self, mailbox: Mailbox) -> None:
        """Test removing a folder that does not exist."""
        with pytest.raises(FolderNotFoundError):
            mailbox.remove_folder("Work")

    def test_remove_folder_discards_messages(self, mailbox: Mailbox) -> None:
        """Test that removal drops the folder's messages by default."""
        work = mailbox.add_folder("Work")
        message = mailbox.compose(subject="Report")
        mailbox.move(message, work)

        removed = mailbox.remove_folder("WORK")

        assert removed is work
        assert mailbox.get_folder("Work") is None
        assert mailbox.message_count() == 0
        assert mailbox.find_folder(message) is None

    def test_remove_folder_can_keep_messages(self, mailbox: Mailbox) -> None:
        """Test migrating messages to Inbox on removal."""
        work = mailbox.add_folder("Work")
        kept = mailbox.compose(subject="Already in inbox")
        first = mailbox.compose(subject="First")
        second = mailbox.compose(subject="Second")
        mailbox.move(first, work)
        mailbox.move(second, work)

        mailbox.remove_folder("Work", keep_messages=True)

        assert mailbox.inbox.messages == (kept, first, second)
        assert mailbox.message_count() == 3

    def test_rename_folder(self, mailbox: Mailbox) -> None:
        """Test renaming a user folder."""
        work = mailbox.add_folder("Work")
        mailbox.add_folder("Home")

        assert mailbox.rename_folder("work", "Office") is work
        assert work.name == "Office"
        assert mailbox.get_folder("Work") is None
        assert mailbox.rename_folder("office", "OFFICE").name == "OFFICE"

        with pytest.raises(DuplicateFolderError):
            mailbox.rename_folder("Office", "home")
        with pytest.raises(DuplicateFolderError):
            mailbox.rename_folder("Office", "Trash")
        with pytest.raises(InvalidFolderNameError):
            mailbox.rename_folder("Office", " ")

    @pytest.mark.parametrize("name", ["Inbox", "trash"])
    def test_rename_reserved_folder_fails(self, mailbox: Mailbox, name: str) -> None:
        """Test that reserved folders keep their names."""
        with pytest.raises(ReservedFolderError):
            mailbox.rename_folder(name, "Elsewhere")

    def test_is_reserved_name(self) -> None:
        """Test reserved name detection."""
        assert is_reserved_name("inbox")
        assert is_reserved_name(" TRASH ")
        assert not is_reserved_name("Inboxes")


class TestMessageOperations:
    """Tests for compose, move, delete and empty-trash."""

    def test_compose_appends_to_inbox(self, mailbox: Mailbox) -> None:
        """Test composing messages."""
        first = mailbox.compose("a@example.com", "c@example.com", "b@example.com", "Hi", "Hello")
        second = mailbox.compose(subject="Again")

        assert mailbox.inbox.messages == (first, second)
        assert first.to == "a@example.com"
        assert first.cc == "c@example.com"
        assert first.bcc == "b@example.com"
        assert first.body == "Hello"

    def test_move_transfers_ownership(self, mailbox: Mailbox, make_message) -> None:
        """Test that move removes from the source and appends to the target."""
        work = mailbox.add_folder("Work")
        existing = make_message("existing")
        work.add(existing)
        message = mailbox.compose(subject="Hi")
        other = mailbox.compose(subject="Other")
        total = mailbox.message_count()

        target = mailbox.move(message, work)

        assert target is work
        assert message not in mailbox.inbox
        assert work.messages == (existing, message)
        assert mailbox.inbox.messages == (other,)
        assert mailbox.message_count() == total

    def test_move_ignores_target_sort_order(self, mailbox: Mailbox, make_message) -> None:
        """Test that moved messages are appended, not inserted in order."""
        work = mailbox.add_folder("Work")
        work.add(make_message("b", 10))
        work.add(make_message("c", 20))
        work.sort_by_subject(ascending=True)
        message = mailbox.compose(subject="a")

        mailbox.move(message, work)

        assert work.messages[-1] is message

    def test_move_accepts_folder_name(self, mailbox: Mailbox) -> None:
        """Test moving by target name."""
        work = mailbox.add_folder("Work")
        message = mailbox.compose(subject="Hi")

        assert mailbox.move(message, "work") is work
        assert message in work

    def test_move_out_of_trash(self, mailbox: Mailbox) -> None:
        """Test that Trash is an ordinary source for move."""
        message = mailbox.compose(subject="Oops")
        mailbox.delete(message)

        mailbox.move(message, mailbox.inbox)

        assert mailbox.inbox.messages == (message,)
        assert len(mailbox.trash) == 0

    def test_move_to_same_folder_reappends(self, mailbox: Mailbox) -> None:
        """Test that moving into the holding folder puts the message last."""
        first = mailbox.compose(subject="1")
        second = mailbox.compose(subject="2")

        target = mailbox.move(first, mailbox.inbox)

        assert target is mailbox.inbox
        assert mailbox.inbox.messages == (second, first)
        assert mailbox.message_count() == 2

    def test_move_unknown_message_fails(self, mailbox: Mailbox, make_message) -> None:
        """Test moving a message no folder holds."""
        work = mailbox.add_folder("Work")

        with pytest.raises(MessageNotFoundError):
            mailbox.move(make_message("stray"), work)

    def test_move_to_unknown_folder_fails(self, mailbox: Mailbox) -> None:
        """Test that foreign folders and unknown names are rejected."""
        message = mailbox.compose(subject="Hi")

        with pytest.raises(FolderNotFoundError):
            mailbox.move(message, Folder("Detached"))
        with pytest.raises(FolderNotFoundError):
            mailbox.move(message, "Nowhere")
        assert mailbox.inbox.messages == (message,)

    def test_move_to_removed_folder_fails(self, mailbox: Mailbox) -> None:
        """Test that a stale handle to a removed folder is rejected."""
        work = mailbox.add_folder("Work")
        mailbox.remove_folder("Work")
        message = mailbox.compose(subject="Hi")

        with pytest.raises(FolderNotFoundError):
            mailbox.move(message, work)

    def test_lookalike_messages_are_tracked_separately(self, mailbox: Mailbox) -> None:
        """Test that moving one of two identical messages leaves the other."""
        work = mailbox.add_folder("Work")
        first = mailbox.compose(subject="Same", body="Same")
        second = mailbox.compose(subject="Same", body="Same")

        mailbox.move(second, work)

        assert mailbox.inbox.messages == (first,)
        assert work.messages == (second,)

    def test_delete_moves_to_trash(self, mailbox: Mailbox) -> None:
        """Test delete from Inbox and from a user folder."""
        work = mailbox.add_folder("Work")
        from_inbox = mailbox.compose(subject="Inbox mail")
        from_work = mailbox.compose(subject="Work mail")
        mailbox.move(from_work, work)

        assert mailbox.delete(from_inbox) is mailbox.trash
        mailbox.delete(from_work)

        assert mailbox.trash.messages == (from_inbox, from_work)
        assert len(mailbox.inbox) == 0
        assert len(work) == 0
        assert mailbox.message_count() == 2

    def test_delete_twice_is_idempotent(self, mailbox: Mailbox) -> None:
        """Test that deleting a trashed message neither duplicates nor loses it."""
        first = mailbox.compose(subject="1")
        second = mailbox.compose(subject="2")
        mailbox.delete(first)
        mailbox.delete(second)

        mailbox.delete(first)

        assert mailbox.trash.messages == (first, second)
        assert mailbox.message_count() == 2

    def test_delete_unknown_message_fails(self, mailbox: Mailbox, make_message) -> None:
        """Test deleting a message no folder holds."""
        with pytest.raises(MessageNotFoundError):
            mailbox.delete(make_message("stray"))

    def test_empty_trash_reports_count(self, mailbox: Mailbox) -> None:
        """Test emptying the trash twice."""
        for i in range(3):
            mailbox.delete(mailbox.compose(subject=str(i)))
        kept = mailbox.compose(subject="kept")

        assert mailbox.empty_trash() == 3
        assert len(mailbox.trash) == 0
        assert mailbox.empty_trash() == 0
        assert mailbox.inbox.messages == (kept,)

    def test_find_folder_scans_all_folders(self, mailbox: Mailbox) -> None:
        """Test locating the holder of a message."""
        work = mailbox.add_folder("Work")
        message = mailbox.compose(subject="Hi")

        assert mailbox.find_folder(message) is mailbox.inbox
        mailbox.move(message, work)
        assert mailbox.find_folder(message) is work

    def test_live_handle_mutation(self, mailbox: Mailbox) -> None:
        """Test that folders returned by lookups are live state."""
        message = mailbox.compose(subject="Hi")

        removed = mailbox.get_folder("inbox").remove_at(0)

        assert removed is message
        assert mailbox.message_count() == 0


class TestConcurrency:
    """Tests for the single exclusive-access lock."""

    def test_concurrent_moves_keep_every_message(self, mailbox: Mailbox) -> None:
        """Test that racing moves never lose or duplicate a message."""
        left = mailbox.add_folder("Left")
        right = mailbox.add_folder("Right")
        messages = [mailbox.compose(subject=str(i)) for i in range(50)]

        def shuffle(target: Folder) -> None:
            for _ in range(20):
                for message in messages:
                    mailbox.move(message, target)

        threads = [threading.Thread(target=shuffle, args=(f,)) for f in (left, right, mailbox.trash)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert mailbox.message_count() == len(messages)
        for message in messages:
            holders = [f for f in mailbox.folders if message in f]
            assert len(holders) == 1

    def test_locked_is_reentrant(self, mailbox: Mailbox) -> None:
        """Test read-then-mutate inside an exclusive scope."""
        mailbox.compose(subject="Hi")

        with mailbox.locked() as held:
            message = held.inbox.get(0)
            held.delete(message)

        assert mailbox.trash.messages == (message,)


def test_concrete_scenario(mailbox: Mailbox) -> None:
    """Compose, file into a folder, delete, then empty the trash."""
    message = mailbox.compose("bob@example.com", "", "", "Hi", "Hello Bob")
    assert mailbox.inbox.messages == (message,)

    work = mailbox.add_folder("Work")
    assert mailbox.get_folder("work") is work

    mailbox.move(message, work)
    assert len(mailbox.inbox) == 0
    assert len(work) == 1

    mailbox.delete(message)
    assert len(work) == 0
    assert len(mailbox.trash) == 1
    assert mailbox.trash.messages[0].subject == "Hi"

    assert mailbox.empty_trash() == 1
    assert len(mailbox.trash) == 0
