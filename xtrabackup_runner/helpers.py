from __future__ import annotations

import datetime as dt
import shutil
from pathlib import Path

import typer


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def copy_tree(src: Path, dst: Path, *, exec_: bool) -> None:
    if exec_:
        if dst.exists():
            shutil.rmtree(dst)
        shutil.copytree(src, dst, symlinks=True)
    typer.echo(("EXEC: " if exec_ else "DRY : ") + f"copy_tree {src} -> {dst}")


def remove_tree(path: Path, *, exec_: bool) -> None:
    typer.echo(("EXEC: " if exec_ else "DRY : ") + f"remove {path}")
    if exec_:
        shutil.rmtree(path)
