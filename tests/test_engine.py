"""Tests for the xtrabackup subprocess wrapper."""

from pathlib import Path

import pytest

from xtrabackup_runner.engine import Engine, printable, run_command, shlex_quote
from xtrabackup_runner.errors import EngineFailure


class TestCommands:
    """Tests for the argument lists passed to xtrabackup."""

    def test_full_backup(self, engine, fake_xtrabackup, tmp_path):
        engine.backup(Path("/var/lib/mysql"), tmp_path / "t", "db", 3307, user="u", password="p")
        assert fake_xtrabackup.calls == [[
            "xtrabackup", "--backup", "--datadir=/var/lib/mysql", f"--target-dir={tmp_path / 't'}",
            "--host=db", "--port=3307", "--user=u", "--password=p",
        ]]

    def test_incremental_backup_without_credentials(self, engine, fake_xtrabackup, tmp_path):
        engine.backup(Path("/d"), tmp_path / "t", "db", 3306, incremental_base=Path("/b/full"))
        cmd = fake_xtrabackup.calls[0]
        assert "--incremental-basedir=/b/full" in cmd
        assert not any(c.startswith(("--user=", "--password=")) for c in cmd)

    def test_prepare_variants(self, engine, fake_xtrabackup, tmp_path):
        engine.prepare(tmp_path)
        engine.prepare(tmp_path, apply_log_only=True)
        engine.prepare(tmp_path, incremental_dir=Path("/inc"))
        assert [c[1:] for c in fake_xtrabackup.calls] == [
            ["--prepare", f"--target-dir={tmp_path}"],
            ["--prepare", "--apply-log-only", f"--target-dir={tmp_path}"],
            ["--prepare", f"--target-dir={tmp_path}", "--incremental-dir=/inc"],
        ]

    def test_copy_back(self, engine, fake_xtrabackup, tmp_path):
        (tmp_path / "src").mkdir()
        engine.copy_back(tmp_path / "data", tmp_path / "src")
        assert fake_xtrabackup.calls[0][1:] == [
            "--copy-back", f"--datadir={tmp_path / 'data'}", f"--target-dir={tmp_path / 'src'}",
        ]


class TestFailures:
    """Tests for exit status handling."""

    def test_nonzero_exit_raises(self, tmp_path):
        engine = Engine("xb", runner=lambda cmd: 3)
        with pytest.raises(EngineFailure) as exc:
            engine.prepare(tmp_path)
        assert exc.value.returncode == 3
        assert exc.value.command[0] == "xb"

    def test_dry_run_never_calls_runner(self, tmp_path, capsys):
        def boom(cmd):
            raise AssertionError("should not run")

        engine = Engine("xtrabackup", exec_=False, runner=boom)
        engine.prepare(tmp_path)
        assert capsys.readouterr().out.startswith("DRY : xtrabackup --prepare")

    def test_missing_binary(self, tmp_path):
        engine = Engine(str(tmp_path / "no-such-xtrabackup"))
        with pytest.raises(EngineFailure):
            engine.prepare(tmp_path)


class TestPrinting:
    """Tests for command echo."""

    def test_password_masked(self):
        assert printable(["xb", "--password=hunter2"]) == "xb --password=***"

    def test_password_with_quotes_masked(self):
        assert printable(["xb", "--host=db", "--password=it's secret"]) == "xb --host=db --password=***"

    def test_quote(self):
        assert shlex_quote("plain/path") == "plain/path"
        assert shlex_quote("it's") == "'it'\\''s'"

    def test_run_command_returns_status(self):
        seen = []
        rc = run_command(["echo", "hi"], runner=lambda cmd: seen.append(cmd) or 5)
        assert rc == 5
        assert seen == [["echo", "hi"]]
