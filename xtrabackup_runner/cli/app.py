#!/usr/bin/env python3
"""
xtrabackup-runner CLI

What it does
- backup: SIMPLE, FULL or INCREMENTAL physical backups via XtraBackup,
  once or every RUN_EVERY.
- restore: stage a backup (plus its full base for incrementals) in a scratch
  dir, prepare it there, copy it back into the data dir.
- cleanup: keep the newest KEEP_BACKUPS full lineages, delete older ones whole.
- remove: delete one backup (a full backup takes its incrementals with it).
- run: execute an arbitrary command inside the container.

Usage examples
  xtrabackup-runner backup
  BACKUP_MODE=INCREMENTAL RUN_EVERY=6h xtrabackup-runner backup
  xtrabackup-runner restore full-2024-01-01-000000-inc-2024-01-01-060000
  xtrabackup-runner cleanup
  xtrabackup-runner --dry-run remove full-2024-01-01-000000

On-disk layout
/backup
├─ 2024-01-01-000000                               (SIMPLE, already prepared)
├─ full-2024-01-01-000000                          (FULL)
├─ full-2024-01-01-000000-inc-2024-01-01-060000    (INCREMENTAL of the above)
└─ full-2024-01-02-000000
"""
from __future__ import annotations

import contextlib
import dataclasses
from pathlib import Path
from typing import Iterator, List, Optional

import typer
from typer.core import TyperGroup

from ..backup import BackupOrchestrator
from ..config import Config
from ..engine import Engine, run_command
from ..errors import BackupError, MissingArgument
from ..lineage import find_orphans, list_records
from ..naming import BackupKind
from ..restore import RestoreOrchestrator
from ..retention import RetentionManager


class FallbackToHelp(TyperGroup):
    """Unknown commands print usage instead of failing."""

    def resolve_command(self, ctx, args: List[str]):
        if args and self.get_command(ctx, args[0]) is None:
            args = ["help"]
        return super().resolve_command(ctx, args)


app = typer.Typer(
    cls=FallbackToHelp,
    add_completion=False,
    invoke_without_command=True,
    help="XtraBackup wrapper: backup, restore and rotate full + incremental backups",
)

# ------------------------------
# Helpers
# ------------------------------

def make_engine(cfg: Config) -> Engine:
    return Engine(cfg.xtrabackup, exec_=not cfg.dry_run)


def load_config(ctx: typer.Context) -> Config:
    opts = ctx.find_root().obj or {}
    cfg = Config.load(config_path=opts.get("config_path"))
    if opts.get("dry_run"):
        cfg = dataclasses.replace(cfg, dry_run=True)
    for w in cfg.warnings:
        typer.echo(f"WARN: {w}", err=True)
    return cfg


@contextlib.contextmanager
def handle_errors() -> Iterator[None]:
    try:
        yield
    except BackupError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(e.exit_code)


def print_usage(ctx: typer.Context) -> None:
    typer.echo(ctx.find_root().get_help())

# ------------------------------
# Commands
# ------------------------------

@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", help="Optional YAML config file"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print engine commands instead of running them"),
):
    ctx.obj = {"config_path": config_path, "dry_run": dry_run}
    if ctx.invoked_subcommand is None:
        print_usage(ctx)


@app.command("help")
def help_cmd(ctx: typer.Context):
    """Show this message."""
    print_usage(ctx)


@app.command()
def backup(ctx: typer.Context):
    """Take a backup per BACKUP_MODE; repeat every RUN_EVERY if set."""
    with handle_errors():
        cfg = load_config(ctx)
        BackupOrchestrator(cfg, make_engine(cfg)).run()


@app.command()
def restore(ctx: typer.Context, name: Optional[str] = typer.Argument(None, help="Backup to restore")):
    """Restore a full or incremental backup into the data directory."""
    with handle_errors():
        if not name:
            raise MissingArgument("backup name to restore")
        cfg = load_config(ctx)
        RestoreOrchestrator(cfg, make_engine(cfg)).restore(name)


@app.command()
def cleanup(ctx: typer.Context):
    """Delete full backups (and their incrementals) beyond KEEP_BACKUPS."""
    with handle_errors():
        cfg = load_config(ctx)
        removed = RetentionManager(cfg).cleanup()
        if removed:
            typer.echo(f"Removed {len(removed)} backup(s)")


@app.command()
def remove(ctx: typer.Context, name: Optional[str] = typer.Argument(None, help="Backup to delete")):
    """Delete one backup; a full backup is removed with its incrementals."""
    with handle_errors():
        if not name:
            raise MissingArgument("backup name to remove")
        cfg = load_config(ctx)
        removed = RetentionManager(cfg).remove(name)
        typer.echo(f"Removed {len(removed)} backup(s)")


@app.command(context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def run(ctx: typer.Context):
    """Run an arbitrary command in the container."""
    if not ctx.args:
        typer.echo("ERROR: Missing argument: command to run", err=True)
        raise typer.Exit(1)
    raise typer.Exit(run_command(list(ctx.args)))


@app.command("list")
def list_cmd(ctx: typer.Context):
    """Overview of full lineages, simple backups and orphaned incrementals."""
    with handle_errors():
        cfg = load_config(ctx)
        manager = RetentionManager(cfg)
        lineages = manager.lineages()
        if not lineages:
            typer.echo("No full backups found.")
        for i, lineage in enumerate(lineages):
            state = "keep" if i < cfg.keep_backups else "expire"
            typer.echo(f"{lineage.name} [{state}]")
            for inc in lineage.incrementals:
                typer.echo(f"  inc: {inc.name}")

        simple = [r.name for r in list_records(cfg.backup_dir, cfg.restore_dir) if r.kind is BackupKind.SIMPLE]
        if simple:
            typer.echo(f"simple: {len(simple)} ({simple[0]} .. {simple[-1]})")
        for orphan in find_orphans(cfg.backup_dir, cfg.restore_dir):
            typer.echo(f"WARN: orphaned incremental {orphan.name} (base {orphan.base} missing)")


if __name__ == "__main__":
    app()  # pragma: no cover
