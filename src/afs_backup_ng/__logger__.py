# pyright: standard

"""afs-backup-ng: afs_backup_ng/__logger__.py
A common logger for displaying through rich.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

# Initialize basic console and handler
cons = Console()
rich_handler = RichHandler(console=cons, show_path=False)


def create_logger(level: str = "INFO", show_time: bool = True) -> None:
    """Route every package logger through rich at the given level.

    Modules log via ``logging.getLogger(__name__)``, so the handler goes on
    the root logger.
    """
    # pylint: disable=global-statement
    global cons, rich_handler

    cons = Console()
    rich_handler = RichHandler(console=cons, show_time=show_time, show_path=False)

    logging.basicConfig(
        format="%(message)s",
        datefmt="%H:%M:%S",
        level=level,
        handlers=[rich_handler],
        force=True,
    )
