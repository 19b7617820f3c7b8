"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from mail_folders.mailbox import Mailbox
from mail_folders.models import Message
from mail_folders.store import SnapshotStore

BASE_TIME = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def mailbox() -> Mailbox:
    """Provide an empty mailbox."""
    return Mailbox()


@pytest.fixture
def store(tmp_path) -> SnapshotStore:
    """Provide a snapshot store writing into a temporary directory."""
    return SnapshotStore(tmp_path / "mailbox.json")


@pytest.fixture
def make_message():
    """Build messages with predictable timestamps.

    ``minutes`` offsets the creation time from a fixed base so date ordering
    is deterministic.
    """

    def _make(subject: str, minutes: int = 0, **fields: str) -> Message:
        return Message(
            to=fields.get("to", "recipient@example.com"),
            cc=fields.get("cc", ""),
            bcc=fields.get("bcc", ""),
            subject=subject,
            body=fields.get("body", f"Body of {subject}"),
            created_at=BASE_TIME + timedelta(minutes=minutes),
        )

    return _make


@pytest.fixture
def settings_cache():
    """Clear the cached settings before and after a test."""
    from mail_folders.config import get_settings

    get_settings.cache_clear()
    yield get_settings
    get_settings.cache_clear()
