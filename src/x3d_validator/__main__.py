"""Module entrypoint for ``python -m x3d_validator``."""

from __future__ import annotations

from x3d_validator.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
