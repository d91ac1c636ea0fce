"""Centralized logging configuration for benefits2ofx.

Standard usage:
    ```python
    import logging
    from benefits2ofx.logging import setup_logging

    # Configure once at application startup
    setup_logging()

    # Get loggers in each module
    logger = logging.getLogger(__name__)
    ```
"""

from .config import LoggingConfig, setup_logging

__all__ = ["LoggingConfig", "setup_logging"]
