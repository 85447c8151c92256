"""Retention: keep the newest K lineages, delete the rest whole."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

import typer

from .config import Config
from .errors import BackupNotFound, DeletionFailed
from .helpers import remove_tree
from .lineage import Lineage, list_lineages
from .naming import BackupKind, parse


class RetentionManager:
    def __init__(self, cfg: Config) -> None:
        self.cfg = cfg

    @property
    def exec_(self) -> bool:
        return not self.cfg.dry_run

    def lineages(self) -> List[Lineage]:
        return list_lineages(self.cfg.backup_dir, self.cfg.restore_dir)

    def plan(self, keep: Optional[int] = None) -> Tuple[List[Lineage], List[Lineage]]:
        k = self.cfg.keep_backups if keep is None else keep
        lineages = self.lineages()
        return lineages[:k], lineages[k:]

    def _remove_paths(self, paths: List[Path], removed: List[Path], failures: List[tuple]) -> bool:
        ok = True
        for p in paths:
            try:
                remove_tree(p, exec_=self.exec_)
            except OSError as e:
                typer.echo(f"WARN: could not remove {p}: {e}", err=True)
                failures.append((p, e))
                ok = False
            else:
                removed.append(p)
        return ok

    def _remove_lineage(self, lineage: Lineage, removed: List[Path], failures: List[tuple]) -> None:
        # incrementals go first, newest first; the full only once they are all gone
        root = self.cfg.backup_dir
        incs = [root / r.name for r in reversed(lineage.incrementals)]
        if self._remove_paths(incs, removed, failures):
            self._remove_paths([root / lineage.name], removed, failures)
        else:
            typer.echo(f"WARN: keeping {lineage.name} until its incrementals are removed", err=True)

    def cleanup(self, keep: Optional[int] = None) -> List[Path]:
        kept, expired = self.plan(keep)
        if not expired:
            typer.echo(f"{len(kept)} full backup(s), nothing to clean up")
            return []
        removed: List[Path] = []
        failures: List[tuple] = []
        for lineage in expired:
            typer.echo(f"Expiring {lineage.name} ({len(lineage.incrementals)} incremental(s))")
            self._remove_lineage(lineage, removed, failures)
        if failures:
            raise DeletionFailed(failures)
        return removed

    def remove(self, name: str) -> List[Path]:
        """Remove ``name``; a full backup takes its incrementals with it."""
        if not (self.cfg.backup_dir / name).is_dir():
            raise BackupNotFound(name)
        record = parse(name)
        removed: List[Path] = []
        failures: List[tuple] = []
        if record.kind is BackupKind.FULL:
            lineage = next(l for l in self.lineages() if l.name == name)
            self._remove_lineage(lineage, removed, failures)
        else:
            self._remove_paths([self.cfg.backup_dir / name], removed, failures)
        if failures:
            raise DeletionFailed(failures)
        return removed
