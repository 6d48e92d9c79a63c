"""Command line interface for afs-backup-ng."""

from .dispatcher import main

__all__ = ["main"]
