"""Subprocess wrapper around the xtrabackup binary.

Each operation is one blocking call; the exit status is the only signal.
"""
from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import typer

from .errors import EngineFailure

Runner = Callable[[List[str]], int]


def shlex_quote(s: str) -> str:
    if re.fullmatch(r"[A-Za-z0-9_./:=+-]+", s):
        return s
    return "'" + s.replace("'", "'\\''") + "'"


def printable(cmd: Sequence[str]) -> str:
    shown = []
    for c in cmd:
        # the mask itself is never quoted
        shown.append("--password=***" if c.startswith("--password=") else shlex_quote(c))
    return " ".join(shown)


def call(cmd: List[str]) -> int:
    try:
        return subprocess.call(cmd)
    except FileNotFoundError as e:
        typer.echo(f"ERROR: {e}", err=True)
        return 127


def sh(cmd: List[str], *, exec_: bool, runner: Runner = call) -> int:
    typer.echo(("EXEC: " if exec_ else "DRY : ") + printable(cmd))
    if not exec_:
        return 0
    return runner(cmd)


def run_command(argv: List[str], *, exec_: bool = True, runner: Runner = call) -> int:
    """Run an arbitrary command and hand back its status."""
    return sh(list(argv), exec_=exec_, runner=runner)


class Engine:
    def __init__(self, binary: str = "xtrabackup", *, exec_: bool = True, runner: Runner = call) -> None:
        self.binary = binary
        self.exec_ = exec_
        self.runner = runner

    def _run(self, *args: str) -> None:
        cmd = [self.binary, *args]
        rc = sh(cmd, exec_=self.exec_, runner=self.runner)
        if rc != 0:
            raise EngineFailure(rc, cmd)

    def backup(
        self,
        data_dir: Path,
        target_dir: Path,
        host: str,
        port: int,
        user: Optional[str] = None,
        password: Optional[str] = None,
        incremental_base: Optional[Path] = None,
    ) -> None:
        args = ["--backup", f"--datadir={data_dir}", f"--target-dir={target_dir}"]
        if incremental_base is not None:
            args.append(f"--incremental-basedir={incremental_base}")
        args += [f"--host={host}", f"--port={port}"]
        if user:
            args.append(f"--user={user}")
        if password:
            args.append(f"--password={password}")
        self._run(*args)

    def prepare(
        self,
        target_dir: Path,
        *,
        apply_log_only: bool = False,
        incremental_dir: Optional[Path] = None,
    ) -> None:
        """Make ``target_dir`` consistent in place.

        ``apply_log_only`` leaves it open for an incremental to be merged;
        ``incremental_dir`` merges that incremental into it.
        """
        args = ["--prepare"]
        if apply_log_only:
            args.append("--apply-log-only")
        args.append(f"--target-dir={target_dir}")
        if incremental_dir is not None:
            args.append(f"--incremental-dir={incremental_dir}")
        self._run(*args)

    def copy_back(self, data_dir: Path, target_dir: Path) -> None:
        self._run("--copy-back", f"--datadir={data_dir}", f"--target-dir={target_dir}")
