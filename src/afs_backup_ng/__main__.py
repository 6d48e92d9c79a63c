"""afs-backup-ng: afs_backup_ng/__main__.py.

Select AFS volumes for backup and hand them to TSM, vos backup or a
custom command.
"""

import sys

from .cli.dispatcher import main

if __name__ == "__main__":
    sys.exit(main())
