"""One backup cycle: name the target, run the engine, optionally prepare."""
from __future__ import annotations

import datetime as dt
import time
from pathlib import Path
from typing import Callable, Optional

import typer

from .config import Config
from .engine import Engine
from .errors import TargetUnwritable
from .helpers import ensure_dir, utcnow
from .lineage import find_latest_full
from .naming import BackupKind, format_timestamp, make_name, parse_full_base
from .scheduler import Scheduler


class BackupOrchestrator:
    def __init__(self, cfg: Config, engine: Engine, clock: Callable[[], dt.datetime] = utcnow) -> None:
        self.cfg = cfg
        self.engine = engine
        self.clock = clock

    def target_name(self) -> str:
        ts = format_timestamp(self.clock())
        if self.cfg.mode is BackupKind.INCREMENTAL:
            base = find_latest_full(self.cfg.backup_dir)
            return make_name(BackupKind.INCREMENTAL, ts, base)
        return make_name(self.cfg.mode, ts)

    def run_once(self) -> Path:
        cfg = self.cfg
        name = self.target_name()
        target = cfg.backup_dir / name

        base_dir: Optional[Path] = None
        if cfg.mode is BackupKind.INCREMENTAL:
            base_dir = cfg.backup_dir / parse_full_base(name)

        if self.engine.exec_:
            try:
                ensure_dir(target)
            except OSError as e:
                raise TargetUnwritable(target, e) from e

        typer.echo(f"Starting {cfg.mode.value} backup {name}")
        self.engine.backup(
            cfg.data_dir,
            target,
            cfg.host,
            cfg.port,
            user=cfg.user,
            password=cfg.password,
            incremental_base=base_dir,
        )

        # full/incremental stay unprepared so later incrementals can layer on them
        if cfg.mode is BackupKind.SIMPLE:
            self.engine.prepare(target)  # roll the redo log forward
            self.engine.prepare(target)  # pre-create log files for a faster start

        typer.echo(f"Backup completed into {target}")
        return target

    def run(
        self,
        sleep: Callable[[float], None] = time.sleep,
        max_cycles: Optional[int] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> int:
        scheduler = scheduler or Scheduler(self.cfg.run_every, sleep=sleep)
        if self.cfg.run_every is not None:
            typer.echo(f"Running a backup every {self.cfg.run_every:g}s")
        return scheduler.run(self.run_once, max_cycles=max_cycles)
