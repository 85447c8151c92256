"""Backup directory naming.

Names encode the lineage of a backup:

    2024-01-01-000000                               simple
    full-2024-01-01-000000                          full
    full-2024-01-01-000000-inc-2024-01-01-010000    incremental of that full

The timestamp is fixed-width and zero padded, so sorting names sorts them
chronologically.
"""
from __future__ import annotations

import datetime as dt
import enum
import re
from dataclasses import dataclass
from typing import Optional

from .errors import MalformedName

TIMESTAMP_FORMAT = "%Y-%m-%d-%H%M%S"  # e.g., 2024-01-01-013000
FULL_PREFIX = "full-"
INC_SEPARATOR = "-inc-"

_TS = r"[0-9]{4}-[0-9]{2}-[0-9]{2}-[0-9]{6}"
TIMESTAMP_RE = re.compile(_TS)
SIMPLE_RE = re.compile(rf"(?P<ts>{_TS})")
FULL_RE = re.compile(rf"full-(?P<ts>{_TS})")
INCREMENTAL_RE = re.compile(rf"(?P<base>full-{_TS})-inc-(?P<ts>{_TS})")


class BackupKind(str, enum.Enum):
    SIMPLE = "SIMPLE"
    FULL = "FULL"
    INCREMENTAL = "INCREMENTAL"


@dataclass(frozen=True)
class BackupRecord:
    kind: BackupKind
    timestamp: str
    name: str
    base: Optional[str] = None  # full name, incrementals only


def format_timestamp(when: dt.datetime) -> str:
    return when.strftime(TIMESTAMP_FORMAT)


def make_name(kind: BackupKind, timestamp: str, base: Optional[str] = None) -> str:
    """Build the canonical directory name for a backup taken at ``timestamp``.

    ``base`` is required for incrementals and ignored otherwise.
    """
    if not TIMESTAMP_RE.fullmatch(timestamp):
        raise MalformedName(timestamp, "timestamp must look like YYYY-MM-DD-HHMMSS")
    if kind is BackupKind.SIMPLE:
        return timestamp
    if kind is BackupKind.FULL:
        return FULL_PREFIX + timestamp
    if base is None:
        raise MalformedName(timestamp, "an incremental backup needs a full base")
    if not FULL_RE.fullmatch(base):
        raise MalformedName(base, "not a full backup name")
    return base + INC_SEPARATOR + timestamp


def try_parse(name: str) -> Optional[BackupRecord]:
    """Parse ``name``; return None when it is not a backup name."""
    m = INCREMENTAL_RE.fullmatch(name)
    if m:
        return BackupRecord(BackupKind.INCREMENTAL, m.group("ts"), name, m.group("base"))
    m = FULL_RE.fullmatch(name)
    if m:
        return BackupRecord(BackupKind.FULL, m.group("ts"), name)
    m = SIMPLE_RE.fullmatch(name)
    if m:
        return BackupRecord(BackupKind.SIMPLE, m.group("ts"), name)
    return None


def parse(name: str) -> BackupRecord:
    record = try_parse(name)
    if record is None:
        raise MalformedName(name)
    return record


def parse_full_base(incremental_name: str) -> str:
    record = try_parse(incremental_name)
    if record is None or record.kind is not BackupKind.INCREMENTAL:
        raise MalformedName(incremental_name, "expected full-<timestamp>-inc-<timestamp>")
    if record.base is None:
        raise MalformedName(incremental_name, "incremental without a full base")
    return record.base


def is_incremental(name: str) -> bool:
    return INCREMENTAL_RE.fullmatch(name) is not None


def is_full(name: str) -> bool:
    return FULL_RE.fullmatch(name) is not None
