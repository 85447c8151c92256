"""Lineage resolution over the backup root.

The directory listing is the only source of truth; there is no index file.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .errors import BaseBackupMissing, NoFullBackupFound
from .naming import BackupKind, BackupRecord, parse_full_base, try_parse

# ------------------------------
# Layout helpers (flat backup root)
# ------------------------------

class Layout:
    def __init__(self, root: Path, scratch: Optional[Path] = None) -> None:
        self.root = root
        self.scratch = scratch

    def path(self, name: str) -> Path:
        return self.root / name

    def exists(self, name: str) -> bool:
        return self.path(name).is_dir()

    def records(self) -> List[BackupRecord]:
        """Backup directories in the root, oldest first."""
        if not self.root.is_dir():
            return []
        out: List[BackupRecord] = []
        for d in self.root.iterdir():
            if not d.is_dir():
                continue
            if self.scratch is not None and d == self.scratch:
                continue
            record = try_parse(d.name)
            if record is not None:
                out.append(record)
        out.sort(key=lambda r: r.name)
        return out


@dataclass
class Lineage:
    full: BackupRecord
    incrementals: List[BackupRecord] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.full.name

    @property
    def names(self) -> List[str]:
        return [self.full.name] + [r.name for r in self.incrementals]


def list_records(root: Path, scratch: Optional[Path] = None) -> List[BackupRecord]:
    return Layout(root, scratch).records()


def list_lineages(root: Path, scratch: Optional[Path] = None) -> List[Lineage]:
    """Group full backups with their incrementals, newest lineage first.

    Incrementals are attached by comparing their parsed base with the full
    name, never by string prefix.
    """
    records = list_records(root, scratch)
    by_full: Dict[str, Lineage] = {
        r.name: Lineage(r) for r in records if r.kind is BackupKind.FULL
    }
    for r in records:
        if r.kind is BackupKind.INCREMENTAL and r.base in by_full:
            by_full[r.base].incrementals.append(r)
    return sorted(by_full.values(), key=lambda l: l.full.name, reverse=True)


def find_orphans(root: Path, scratch: Optional[Path] = None) -> List[BackupRecord]:
    """Incrementals whose full base directory is gone."""
    records = list_records(root, scratch)
    fulls = {r.name for r in records if r.kind is BackupKind.FULL}
    return [r for r in records if r.kind is BackupKind.INCREMENTAL and r.base not in fulls]


def find_latest_full(root: Path) -> str:
    fulls = sorted(
        (r.name for r in list_records(root) if r.kind is BackupKind.FULL),
        reverse=True,
    )
    if not fulls:
        raise NoFullBackupFound(root)
    return fulls[0]


def resolve_base(root: Path, incremental_name: str) -> str:
    base = parse_full_base(incremental_name)
    if not (root / base).is_dir():
        raise BaseBackupMissing(incremental_name, base)
    return base
