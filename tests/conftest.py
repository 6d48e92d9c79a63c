"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from afs_backup_ng.inventory import MountInventory, MountPoint, MountType


@pytest.fixture
def tmp_config_dir(tmp_path):
    """Create a temporary config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture(autouse=True)
def no_afsbackup_env(monkeypatch):
    """Keep a real $AFSBACKUP from leaking into config discovery."""
    monkeypatch.delenv("AFSBACKUP", raising=False)


@pytest.fixture
def sample_config_toml():
    """Return a sample valid TOML configuration string."""
    return """
[global]
basepath = "/afs/example.org/"
state_dir = "/srv/afsbackup"
lockfile = "/var/lock/afs-backup-ng.lock"
timing = true

[commands]
vosbackup = ["vos", "backup", "-localauth"]
dsmc = "dsmc -se=afs"

[modes.tsm]
lastbackup = true
dotbackup = true
tmp_mount_path = "/afs/example.org/.backup-tmp/"
dumpacls = true

[modes.tsm.backup]
path = ["^/afs/example.org/user/", "!/scratch"]
volume = ["^proj\\\\.", "!\\\\.readonly$"]

[modes.tsm.policy]
order = "volume path"
default = "STANDARD"

[modes.tsm.policy.path]
"^/afs/example.org/user/" = "USERS"
"^/afs/example.org/user/a/" = "USERS_A"

[modes.tsm.policy.volume]
"^proj\\\\.archive" = "ARCHIVE"

[modes.vosbackup.backup]
volume = ["."]

[modes.rsync]
lastbackup = true
command = ["rsync", "-a", "{path}/", "/backup/{volume}/"]

[modes.rsync.backup]
path = ["^/afs/example.org/proj/"]
"""


@pytest.fixture
def minimal_config_toml():
    """Return a minimal valid TOML configuration string."""
    return """
[modes.vosbackup.backup]
volume = ["^user\\\\."]
"""


@pytest.fixture
def config_file(tmp_config_dir, sample_config_toml):
    """Create a config file with sample content."""
    config_path = tmp_config_dir / "config.toml"
    config_path.write_text(sample_config_toml)
    return config_path


@pytest.fixture
def minimal_config_file(tmp_config_dir, minimal_config_toml):
    """Create a minimal config file."""
    config_path = tmp_config_dir / "config.toml"
    config_path.write_text(minimal_config_toml)
    return config_path


def build_inventory(*mounts) -> MountInventory:
    """Build an inventory from (path, volume[, mount_type]) tuples."""
    points = []
    for mount in mounts:
        path, volume = mount[0], mount[1]
        mount_type = mount[2] if len(mount) > 2 else MountType.NORMAL
        points.append(MountPoint(path, volume, "example.org", mount_type))
    return MountInventory.from_mounts(points)


@pytest.fixture
def make_inventory():
    """Factory building an inventory from (path, volume[, mount_type]) tuples."""
    return build_inventory


@pytest.fixture
def cell_inventory():
    """A small cell with users, projects, a read-only and a scratch mount."""
    return build_inventory(
        ("/afs/example.org/", "root.cell"),
        ("/afs/.example.org/", "root.cell", MountType.OTHER),
        ("/afs/example.org/user/a/alice/", "user.alice"),
        ("/afs/example.org/user/b/bob/", "user.bob"),
        ("/afs/example.org/user/b/bob/scratch/", "user.bob.scratch"),
        ("/afs/example.org/proj/web/", "proj.web"),
        ("/afs/example.org/proj/web-old/", "proj.web", MountType.OTHER),
        ("/afs/example.org/proj/archive/", "proj.archive"),
        ("/afs/example.org/readonly/web/", "proj.web.readonly", MountType.READ_ONLY),
    )


@pytest.fixture
def state_dir(tmp_path) -> Path:
    """An AFSBACKUP style state directory with the TSM head files."""
    root = tmp_path / "afsbackup"
    (root / "etc" / "common").mkdir(parents=True)
    (root / "etc" / "hosts" / "afs1").mkdir(parents=True)
    (root / "etc" / "common" / "dsm.sys.head").write_text("* common head\n")
    (root / "etc" / "hosts" / "afs1" / "dsm.sys.head").write_text(
        "SErvername tsm1\n   NODename afs1\n"
    )
    (root / "etc" / "hosts" / "afs1" / "dsm.opt.head").write_text("SErvername tsm1\n")
    (root / "etc" / "common" / "exclude.list").write_text("EXCLUDE /.../core\n")
    return root
