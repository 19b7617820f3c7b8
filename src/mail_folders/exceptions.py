"""Custom exceptions for Mail Folders."""


class MailFoldersError(Exception):
    """Base exception for all Mail Folders errors."""


class DuplicateFolderError(MailFoldersError):
    """Exception raised when a folder name is already taken (case-insensitive)."""


class ReservedFolderError(MailFoldersError):
    """Exception raised when Inbox or Trash would be removed, renamed or shadowed."""


class InvalidFolderNameError(MailFoldersError):
    """Exception raised for blank folder names."""


class FolderNotFoundError(MailFoldersError):
    """Exception raised when no folder matches a name or handle."""


class MessageNotFoundError(MailFoldersError):
    """Exception raised when a message is not held by any folder of the mailbox."""


class IndexOutOfRangeError(MailFoldersError, IndexError):
    """Exception raised for an out-of-bounds folder position."""


class PersistenceLoadError(MailFoldersError):
    """Exception raised when a mailbox snapshot is missing or unreadable."""


class PersistenceSaveError(MailFoldersError):
    """Exception raised when a mailbox snapshot cannot be written."""
