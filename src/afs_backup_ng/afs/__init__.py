"""Wrappers around the OpenAFS command line tools."""

from .fs import FsClient
from .vos import BACKUP_SUFFIX, VosClient, parse_examine_date

__all__ = ["BACKUP_SUFFIX", "FsClient", "VosClient", "parse_examine_date"]
