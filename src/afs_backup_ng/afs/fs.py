"""Mount point handling through the AFS ``fs`` command."""

from ..__util__ import CommandResult, CommandRunner


class FsClient:
    """Create and remove AFS mount points."""

    def __init__(self, runner: CommandRunner, fs: list[str] | None = None) -> None:
        self.runner = runner
        self.fs = list(fs or ["fs"])

    def make_mount(self, path: str, volume: str) -> CommandResult:
        return self.runner.run(self.fs + ["mkmount", path, volume])

    def remove_mount(self, path: str) -> CommandResult:
        # Failing because nothing was mounted there is fine
        return self.runner.run(self.fs + ["rmmount", path])

    def remount(self, path: str, volume: str) -> CommandResult:
        """Point path at volume, replacing whatever was mounted there."""
        self.remove_mount(path)
        return self.make_mount(path, volume)
