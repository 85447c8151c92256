"""Shared fixtures: a fake xtrabackup that touches the filesystem like the real one."""

import datetime as dt
import hashlib
import shutil
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from xtrabackup_runner.config import Config
from xtrabackup_runner.engine import Engine


def _opt(cmd: List[str], name: str) -> Optional[str]:
    prefix = f"--{name}="
    for c in cmd:
        if c.startswith(prefix):
            return c[len(prefix):]
    return None


class FakeXtrabackup:
    """Runner for Engine that records commands and simulates their effects.

    --backup writes a data file into the target, --prepare appends to a
    log file inside the target (so it mutates it in place), --copy-back
    copies the target into the data dir.
    """

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.fail_on: Dict[str, int] = {}

    def ops(self) -> List[str]:
        return [c[1] for c in self.calls]

    def __call__(self, cmd: List[str]) -> int:
        self.calls.append(list(cmd))
        op = cmd[1]
        if op in self.fail_on:
            return self.fail_on[op]
        target = Path(_opt(cmd, "target-dir"))
        if op == "--backup":
            target.mkdir(parents=True, exist_ok=True)
            (target / "ibdata1").write_text(f"data for {target.name}\n")
        elif op == "--prepare":
            with (target / "xtrabackup_prepare.log").open("a") as f:
                f.write(" ".join(cmd[2:]) + "\n")
        elif op == "--copy-back":
            datadir = Path(_opt(cmd, "datadir"))
            shutil.copytree(target, datadir, dirs_exist_ok=True)
        return 0


def tree_hash(root: Path) -> str:
    h = hashlib.sha256()
    for p in sorted(root.rglob("*")):
        h.update(str(p.relative_to(root)).encode())
        if p.is_file():
            h.update(p.read_bytes())
    return h.hexdigest()


def make_backups(root: Path, *names: str) -> None:
    for name in names:
        d = root / name
        d.mkdir(parents=True)
        (d / "ibdata1").write_text(f"data for {name}\n")


@pytest.fixture
def fake_xtrabackup() -> FakeXtrabackup:
    return FakeXtrabackup()


@pytest.fixture
def engine(fake_xtrabackup) -> Engine:
    return Engine("xtrabackup", exec_=True, runner=fake_xtrabackup)


@pytest.fixture
def backup_root(tmp_path) -> Path:
    root = tmp_path / "backup"
    root.mkdir()
    return root


@pytest.fixture
def make_config(tmp_path, backup_root):
    def _make(**overrides) -> Config:
        values = dict(
            backup_dir=backup_root,
            data_dir=tmp_path / "mysql",
            restore_dir=tmp_path / "restore",
            host="db",
            port=3306,
            user="backup",
            password="s3cret",
        )
        values.update(overrides)
        return Config(**values)

    return _make


@pytest.fixture
def fixed_clock():
    return lambda: dt.datetime(2024, 1, 1, 1, 30, 0, tzinfo=dt.timezone.utc)
