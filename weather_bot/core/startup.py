from __future__ import annotations

from .application import Application
from ..config import load_config, log_summary
from ..logging_config import setup_logging


def create_application() -> Application:
    config = load_config()
    setup_logging(config.logs_dir)
    log_summary(config)
    return Application(config=config)
