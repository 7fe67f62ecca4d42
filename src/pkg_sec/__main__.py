"""Entry point for ``python -m pkg_sec``."""

from pkg_sec.cli import app

app()
