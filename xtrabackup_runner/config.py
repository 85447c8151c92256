"""Runtime configuration, resolved once at startup.

Sources, highest precedence first: environment variables, an optional YAML
file (``--config`` or ``BACKUP_CONFIG``), built-in defaults. Keys in the YAML
file are the lowercase environment names, e.g.:

    backup_mode: INCREMENTAL
    run_every: 6h
    keep_backups: 7
    host: db
    port: 3306
    user: backup
    password: s3cret
    backup_dir: /backup
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import humanfriendly
import yaml

from .errors import ConfigError
from .naming import BackupKind, try_parse

# documented insecure defaults; each one triggers a warning when used
INSECURE_DEFAULTS: Dict[str, Any] = {
    "USER": "root",
    "PASSWORD": "password",
    "HOST": "127.0.0.1",
    "PORT": 3306,
}

DEFAULTS: Dict[str, Any] = {
    "BACKUP_MODE": "SIMPLE",
    "RUN_EVERY": "",
    "KEEP_BACKUPS": 4,
    "BACKUP_DIR": "/backup",
    "DATA_DIR": "/var/lib/mysql",
    "RESTORE_DIR": "/tmp/restore",
    "XTRABACKUP": "xtrabackup",
    "DRY_RUN": False,
    **INSECURE_DEFAULTS,
}


def parse_interval(value: Any) -> Optional[float]:
    """'' -> None (run once); '1d', '12h', '90' -> seconds."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        seconds = humanfriendly.parse_timespan(text)
    except humanfriendly.InvalidTimespan as e:
        raise ConfigError(f"Invalid RUN_EVERY {text!r}: {e}") from e
    if seconds <= 0:
        raise ConfigError(f"RUN_EVERY must be positive, got {text!r}")
    return seconds


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _int(key: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be an integer, got {value!r}")


def read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config not found at {path}")
    try:
        raw = yaml.safe_load(path.read_text("utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Config {path} must be a mapping")
    return {str(k).upper(): v for k, v in raw.items()}


def check_scratch_dir(backup_dir: Path, restore_dir: Path) -> None:
    """The scratch dir is wiped on every restore; it must not contain the backups."""
    backups = backup_dir.resolve()
    scratch = restore_dir.resolve()
    if scratch == backups or scratch in backups.parents:
        raise ConfigError(f"RESTORE_DIR {restore_dir} must not be BACKUP_DIR or one of its parents")
    if scratch.parent == backups and try_parse(scratch.name) is not None:
        raise ConfigError(f"RESTORE_DIR {restore_dir} would overwrite backup {scratch.name}")


@dataclass(frozen=True)
class Config:
    mode: BackupKind = BackupKind.SIMPLE
    run_every: Optional[float] = None  # seconds; None runs once
    keep_backups: int = 4

    host: str = "127.0.0.1"
    port: int = 3306
    user: Optional[str] = "root"
    password: Optional[str] = "password"

    backup_dir: Path = Path("/backup")
    data_dir: Path = Path("/var/lib/mysql")
    restore_dir: Path = Path("/tmp/restore")
    xtrabackup: str = "xtrabackup"
    dry_run: bool = False

    warnings: Tuple[str, ...] = field(default=(), compare=False)

    @staticmethod
    def load(environ: Optional[Mapping[str, str]] = None, config_path: Optional[Path] = None) -> "Config":
        env = os.environ if environ is None else environ
        if config_path is None and env.get("BACKUP_CONFIG"):
            config_path = Path(env["BACKUP_CONFIG"])
        file_values = read_config_file(config_path.expanduser()) if config_path else {}

        warnings = []

        def get(key: str) -> Any:
            if key in env:
                return env[key]
            if key in file_values:
                return file_values[key]
            if key in INSECURE_DEFAULTS:
                warnings.append(f"{key} not set, using insecure default")
            return DEFAULTS[key]

        mode_raw = str(get("BACKUP_MODE")).strip().upper()
        try:
            mode = BackupKind(mode_raw)
        except ValueError:
            raise ConfigError(f"BACKUP_MODE must be one of SIMPLE, FULL, INCREMENTAL; got {mode_raw!r}")

        keep = _int("KEEP_BACKUPS", get("KEEP_BACKUPS"))
        if keep < 0:
            raise ConfigError(f"KEEP_BACKUPS must not be negative, got {keep}")

        cfg = Config(
            mode=mode,
            run_every=parse_interval(get("RUN_EVERY")),
            keep_backups=keep,
            host=str(get("HOST")),
            port=_int("PORT", get("PORT")),
            user=get("USER") or None,
            password=get("PASSWORD") or None,
            backup_dir=Path(str(get("BACKUP_DIR"))).expanduser(),
            data_dir=Path(str(get("DATA_DIR"))).expanduser(),
            restore_dir=Path(str(get("RESTORE_DIR"))).expanduser(),
            xtrabackup=str(get("XTRABACKUP")),
            dry_run=parse_bool(get("DRY_RUN")),
            warnings=tuple(warnings),
        )
        check_scratch_dir(cfg.backup_dir, cfg.restore_dir)
        return cfg
