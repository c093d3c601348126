"""Allow ``python -m keyproxy``."""

from .main import run

run()
