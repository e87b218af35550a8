"""Module entry point allowing ``python -m weather_bot``."""
from __future__ import annotations

from .core.main import run


if __name__ == "__main__":
    run()
