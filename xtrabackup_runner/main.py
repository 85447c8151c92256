"""Console entry point."""
from __future__ import annotations

from .cli.app import app


def run() -> None:
    app(prog_name="xtrabackup-runner")


if __name__ == "__main__":
    run()
