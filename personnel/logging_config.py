from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_app_logging(level: str = "INFO") -> None:
    """
    Set the level for everything under the `personnel` logger.

    Notes:
    - Uvicorn installs its own handlers; we only attach one when running bare
      (scripts, the REPL) so records are not silently dropped.
    - Set `PERSONNEL_LOG_LEVEL=DEBUG` (or INFO/WARNING/ERROR) to control verbosity.
    """

    normalized = level.upper()
    package_logger = logging.getLogger("personnel")
    package_logger.setLevel(normalized)
    package_logger.propagate = True

    if not logging.getLogger().handlers and not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        package_logger.addHandler(handler)
