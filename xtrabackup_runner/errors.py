"""Error taxonomy. Every failure is fatal to the current command."""
from __future__ import annotations

from typing import List, Optional, Sequence


class BackupError(Exception):
    """Base class; ``exit_code`` is what the CLI exits with."""

    exit_code = 1


class ConfigError(BackupError):
    pass


class MalformedName(BackupError):
    def __init__(self, name: str, reason: str = "does not match the backup naming scheme") -> None:
        super().__init__(f"Malformed backup name {name!r}: {reason}")
        self.name = name


class NoFullBackupFound(BackupError):
    def __init__(self, root) -> None:
        super().__init__(f"No full backup found in {root}. Run a FULL backup first.")
        self.root = root


class BaseBackupMissing(BackupError):
    def __init__(self, name: str, base: str) -> None:
        super().__init__(f"Base backup {base!r} of {name!r} does not exist")
        self.name = name
        self.base = base


class BackupNotFound(BackupError):
    exit_code = 2

    def __init__(self, name: str) -> None:
        super().__init__(f"Backup {name!r} not found")
        self.name = name


class MissingArgument(BackupError):
    def __init__(self, what: str) -> None:
        super().__init__(f"Missing argument: {what}")


class TargetUnwritable(BackupError):
    def __init__(self, path, cause: Optional[BaseException] = None) -> None:
        detail = f": {cause}" if cause else ""
        super().__init__(f"Cannot create backup directory {path}{detail}")
        self.path = path


class EngineFailure(BackupError):
    def __init__(self, returncode: int, command: Sequence[str]) -> None:
        super().__init__(f"{command[0]} exited with status {returncode}")
        self.returncode = returncode
        self.command = list(command)


class DeletionFailed(BackupError):
    def __init__(self, failures: List[tuple]) -> None:
        paths = ", ".join(str(p) for p, _ in failures)
        super().__init__(f"Failed to remove {len(failures)} path(s): {paths}")
        self.failures = failures


class StagingFailed(BackupError):
    def __init__(self, path, cause: Optional[BaseException] = None) -> None:
        detail = f": {cause}" if cause else ""
        super().__init__(f"Cannot stage restore in {path}{detail}")
        self.path = path
