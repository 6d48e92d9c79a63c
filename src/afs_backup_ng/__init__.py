"""afs-backup-ng: afs_backup_ng/__init__.py."""

import socket


__version__ = "0.3.0"


def short_hostname(hostname: str | None = None) -> str:
    """Strip the domain part off a hostname ('afs1.example.org' -> 'afs1')"""
    return (hostname or socket.gethostname()).split(".", 1)[0]
