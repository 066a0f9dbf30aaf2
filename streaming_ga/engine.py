"""Engine for programmatically running the streaming GA."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .application import StandardApplicationFactory

if TYPE_CHECKING:
    from .application import StreamingApplication
    from .config.app_config import AppConfig


logger = logging.getLogger(__name__)


def init_logging(app_config: AppConfig) -> None:
    """Initialize logging for the application."""
    logging_model = app_config.logging
    file = logging.FileHandler(
        filename=Path(logging_model.log_file),
        mode="w",
        encoding="utf-8",
        delay=True,
    )
    file.setLevel(logging_model.loglevel_file)
    file.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s[%(threadName)s:%(module)s] %(message)s"))

    console = logging.StreamHandler()
    console.setLevel(logging_model.loglevel_console)
    console.setFormatter(logging.Formatter("%(levelname)s[%(module)s] %(message)s"))

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.addHandler(file)
    root.addHandler(console)

    root.debug("Start: Streaming GA.")
    app_config.log_creation_info()


def build_application(app_config: AppConfig) -> StreamingApplication:
    """Build the application described by a configuration."""
    return StandardApplicationFactory().build(app_config)


def run_instance(app_config: AppConfig) -> StreamingApplication:
    """Build and run an application until its algorithm terminates."""
    app = build_application(app_config)
    app.run()
    return app
