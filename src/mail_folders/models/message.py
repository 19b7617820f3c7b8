"""Message record.

A Message is a local email record. It is frozen after construction, and two
messages with identical fields are still distinct: equality and hashing are
by identity so folders can track each record independently.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

_PREVIEW_LENGTH = 100
_SUMMARY_DATE_FORMAT = "%Y-%m-%d %H:%M"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, eq=False)
class Message:
    """A single email held by exactly one folder of a mailbox.

    Attributes:
        to: Free-text recipient list.
        cc: Free-text carbon copy list.
        bcc: Free-text blind carbon copy list.
        subject: Subject line, used for subject sorting.
        body: Message text.
        created_at: Creation timestamp (UTC), used for date sorting.
    """

    to: str = ""
    cc: str = ""
    bcc: str = ""
    subject: str = ""
    body: str = ""
    created_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        # Naive timestamps are taken as UTC so date sorting never mixes
        # naive and aware values.
        if self.created_at.tzinfo is None:
            object.__setattr__(self, "created_at", self.created_at.replace(tzinfo=timezone.utc))

    @property
    def preview(self) -> str:
        """First characters of the body with whitespace collapsed."""
        text = " ".join(self.body.split())
        if len(text) > _PREVIEW_LENGTH:
            return text[: _PREVIEW_LENGTH - 3] + "..."
        return text

    def summary(self, date_format: str = _SUMMARY_DATE_FORMAT) -> str:
        return f"{self.created_at.strftime(date_format)}  {self.subject}"

    def __repr__(self) -> str:
        return f"Message(subject={self.subject!r}, to={self.to!r}, created_at={self.created_at.isoformat()})"
