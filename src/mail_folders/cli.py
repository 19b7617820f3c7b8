"""Command-line interface for Mail Folders.

Each invocation loads the mailbox snapshot (or starts an empty mailbox),
runs one command and saves the snapshot again if the command changed it.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path

import structlog

from mail_folders import __version__
from mail_folders.config import get_settings
from mail_folders.exceptions import MailFoldersError
from mail_folders.mailbox import Mailbox
from mail_folders.models import Folder, SortOrder
from mail_folders.store import SnapshotStore

logger = structlog.get_logger()

_SORT_CHOICES = {
    "subject-asc": SortOrder.SUBJECT_ASCENDING,
    "subject-desc": SortOrder.SUBJECT_DESCENDING,
    "date-asc": SortOrder.DATE_ASCENDING,
    "date-desc": SortOrder.DATE_DESCENDING,
}

_DATE_FORMAT = "%I:%M%p %m/%d/%Y"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mail-folders", description="Mail Folders")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        help="Path to the mailbox snapshot (default: settings snapshot_path)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("folders", help="List folders and their message counts")

    add_parser = subparsers.add_parser("add-folder", help="Create a user folder")
    add_parser.add_argument("name", help="Folder name")

    remove_parser = subparsers.add_parser("remove-folder", help="Remove a user folder")
    remove_parser.add_argument("name", help="Folder name")
    remove_parser.add_argument(
        "--keep-messages",
        action="store_true",
        help="Move the folder's messages to the Inbox instead of discarding them",
    )

    rename_parser = subparsers.add_parser("rename-folder", help="Rename a user folder")
    rename_parser.add_argument("name", help="Current folder name")
    rename_parser.add_argument("new_name", help="New folder name")

    compose_parser = subparsers.add_parser("compose", help="Create a message in the Inbox")
    compose_parser.add_argument("--to", default="", help="Recipients")
    compose_parser.add_argument("--cc", default="", help="Carbon copy recipients")
    compose_parser.add_argument("--bcc", default="", help="Blind carbon copy recipients")
    compose_parser.add_argument("--subject", default="", help="Subject line")
    compose_parser.add_argument("--body", default="", help="Message body")

    list_parser = subparsers.add_parser("list", help="List the messages of a folder")
    list_parser.add_argument("folder", help="Folder name")
    list_parser.add_argument(
        "--sort",
        choices=sorted(_SORT_CHOICES),
        default=None,
        help="Sort the folder before listing (the order is saved)",
    )

    show_parser = subparsers.add_parser("show", help="Show one message")
    show_parser.add_argument("folder", help="Folder name")
    show_parser.add_argument("index", type=int, help="1-based message index")

    move_parser = subparsers.add_parser("move", help="Move a message to another folder")
    move_parser.add_argument("folder", help="Folder holding the message")
    move_parser.add_argument("index", type=int, help="1-based message index")
    move_parser.add_argument("target", help="Destination folder name")

    delete_parser = subparsers.add_parser("delete", help="Move a message to the Trash")
    delete_parser.add_argument("folder", help="Folder holding the message")
    delete_parser.add_argument("index", type=int, help="1-based message index")

    subparsers.add_parser("empty-trash", help="Permanently discard everything in the Trash")

    return parser


def _print_folder(folder: Folder) -> None:
    print(f"{folder.name} (sorted: {folder.sort_order.value})")
    if not len(folder):
        print("The folder is empty.")
        return

    print("-" * 40)
    for i, message in enumerate(folder, start=1):
        print(f"{i:>4}. {message.summary(_DATE_FORMAT)}")
        if message.preview:
            print(f"      {message.preview}")


def _cmd_folders(mailbox: Mailbox, args: argparse.Namespace) -> bool:
    for folder in mailbox.folders:
        print(f"{folder.name}\t{len(folder)}")
    return False


def _cmd_add_folder(mailbox: Mailbox, args: argparse.Namespace) -> bool:
    folder = mailbox.add_folder(args.name)
    print(f"Folder added: {folder.name}")
    return True


def _cmd_remove_folder(mailbox: Mailbox, args: argparse.Namespace) -> bool:
    folder = mailbox.remove_folder(args.name, keep_messages=args.keep_messages)
    if args.keep_messages:
        print(f"{folder.name} has been deleted; its messages were moved to the Inbox.")
    else:
        print(f"{folder.name} has been deleted ({len(folder)} message(s) discarded).")
    return True


def _cmd_rename_folder(mailbox: Mailbox, args: argparse.Namespace) -> bool:
    folder = mailbox.rename_folder(args.name, args.new_name)
    print(f"Folder renamed to {folder.name}")
    return True


def _cmd_compose(mailbox: Mailbox, args: argparse.Namespace) -> bool:
    message = mailbox.compose(
        to=args.to,
        cc=args.cc,
        bcc=args.bcc,
        subject=args.subject,
        body=args.body,
    )
    print(f'"{message.subject}" added to {mailbox.inbox.name}.')
    return True


def _cmd_list(mailbox: Mailbox, args: argparse.Namespace) -> bool:
    folder = mailbox.require_folder(args.folder)
    if args.sort:
        folder.sort(_SORT_CHOICES[args.sort])
    _print_folder(folder)
    return args.sort is not None


def _cmd_show(mailbox: Mailbox, args: argparse.Namespace) -> bool:
    message = mailbox.require_folder(args.folder).get(args.index - 1)
    print(f"To: {message.to}")
    print(f"CC: {message.cc}")
    print(f"BCC: {message.bcc}")
    print(f"Subject: {message.subject}")
    print(f"Date: {message.created_at.isoformat()}")
    print(f"Body: {message.body}")
    return False


def _cmd_move(mailbox: Mailbox, args: argparse.Namespace) -> bool:
    with mailbox.locked():
        message = mailbox.require_folder(args.folder).get(args.index - 1)
        target = mailbox.move(message, args.target)
    print(f'"{message.subject}" successfully moved to {target.name}.')
    return True


def _cmd_delete(mailbox: Mailbox, args: argparse.Namespace) -> bool:
    with mailbox.locked():
        message = mailbox.require_folder(args.folder).get(args.index - 1)
        mailbox.delete(message)
    print(f'"{message.subject}" has been moved to the trash.')
    return True


def _cmd_empty_trash(mailbox: Mailbox, args: argparse.Namespace) -> bool:
    cleared = mailbox.empty_trash()
    if cleared:
        print(f"{cleared} item(s) successfully deleted.")
    else:
        print("Trash folder is empty. There is nothing to delete.")
    return cleared > 0


_COMMANDS: dict[str, Callable[[Mailbox, argparse.Namespace], bool]] = {
    "folders": _cmd_folders,
    "add-folder": _cmd_add_folder,
    "remove-folder": _cmd_remove_folder,
    "rename-folder": _cmd_rename_folder,
    "compose": _cmd_compose,
    "list": _cmd_list,
    "show": _cmd_show,
    "move": _cmd_move,
    "delete": _cmd_delete,
    "empty-trash": _cmd_empty_trash,
}


def main(args: list[str] | None = None) -> int:
    """Main entry point for the Mail Folders CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()

    # Configure logging; stdout is reserved for command output.
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if settings.debug else getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )

    parser = _build_parser()
    parsed = parser.parse_args(args)

    handler = _COMMANDS.get(parsed.command)
    if handler is None:
        logger.error("unknown_command", command=parsed.command)
        return 2

    store = SnapshotStore(parsed.snapshot or settings.snapshot_path, indent=settings.snapshot_indent)
    result = store.load_or_create()
    if result.warning:
        print(f"Warning: {result.warning}", file=sys.stderr)

    try:
        changed = handler(result.mailbox, parsed)
        if changed and settings.autosave:
            store.save(result.mailbox)
    except MailFoldersError as e:
        logger.debug("command_failed", command=parsed.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
