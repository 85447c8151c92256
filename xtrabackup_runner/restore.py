"""Restore a backup into the live data directory.

Finalizing mutates a backup in place, so everything is staged into the
scratch directory first; the originals stay usable as lineage bases.

    <restore_dir>/full   copy of the full (or simple) backup, prepared here
    <restore_dir>/inc    copy of the incremental, merged into full/
"""
from __future__ import annotations

import shutil
from pathlib import Path

import typer

from .config import Config, check_scratch_dir
from .engine import Engine
from .errors import BackupNotFound, StagingFailed
from .helpers import copy_tree, ensure_dir
from .lineage import resolve_base
from .naming import BackupKind, parse


class RestoreOrchestrator:
    def __init__(self, cfg: Config, engine: Engine) -> None:
        self.cfg = cfg
        self.engine = engine

    @property
    def full_scratch(self) -> Path:
        return self.cfg.restore_dir / "full"

    @property
    def inc_scratch(self) -> Path:
        return self.cfg.restore_dir / "inc"

    def reset_scratch(self) -> None:
        scratch = self.cfg.restore_dir
        check_scratch_dir(self.cfg.backup_dir, scratch)
        if self.engine.exec_:
            try:
                if scratch.exists():
                    shutil.rmtree(scratch)
                ensure_dir(scratch)
            except OSError as e:
                raise StagingFailed(scratch, e) from e
        typer.echo(("EXEC: " if self.engine.exec_ else "DRY : ") + f"reset scratch {scratch}")

    def stage(self, src: Path, dst: Path) -> None:
        try:
            copy_tree(src, dst, exec_=self.engine.exec_)
        except OSError as e:
            raise StagingFailed(dst, e) from e

    def restore(self, name: str) -> Path:
        cfg = self.cfg
        source = cfg.backup_dir / name
        if not source.is_dir():
            raise BackupNotFound(name)
        record = parse(name)

        base = None
        if record.kind is BackupKind.INCREMENTAL:
            base = resolve_base(cfg.backup_dir, name)

        self.reset_scratch()
        full = self.full_scratch

        if base is None:
            self.stage(source, full)
            self.engine.prepare(full)
        else:
            self.stage(cfg.backup_dir / base, full)
            self.stage(source, self.inc_scratch)
            self.engine.prepare(full, apply_log_only=True)
            self.engine.prepare(full, incremental_dir=self.inc_scratch)

        self.engine.copy_back(cfg.data_dir, full)
        typer.echo(f"Restored {name} into {cfg.data_dir}")
        return full
