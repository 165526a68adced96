from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Minimal logging configuration for the service.

    Notes:
    - stdlib logging only; Uvicorn already installs handlers, so this only sets levels.
    - Set `ESTATEHUB_LOG_LEVEL=DEBUG` to see individual policy decisions.
    - Tokens and password material are never passed to a logger anywhere in the package.
    """

    normalized = level.upper()
    logging.getLogger("estatehub").setLevel(normalized)
    # Child loggers under estatehub.* inherit this level.
    logging.getLogger("estatehub").propagate = True
