# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Simple logging configuration using Python's standard logging with Rich.

Exploration code logs through module-level loggers; this module only decides
where those records go. Query summaries are emitted at INFO, knee-tree updates
at DEBUG and lost log-file records at ERROR.

Usage:
    from costexplorer._internal.logging import setup_logging

    # Once, in the calling application
    setup_logging(level="info")

    # In library code
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Processing...")
"""

import logging

from rich.logging import RichHandler

LEVEL_MAP = {
    'error': logging.ERROR,
    'warning': logging.WARNING,
    'info': logging.INFO,
    'debug': logging.DEBUG,
}


def resolve_level(level: str) -> int:
    """Map a level name ('error', 'warning', 'info', 'debug') to a logging constant.

    Unknown names fall back to WARNING.
    """
    return LEVEL_MAP.get(level.lower(), logging.WARNING)


def setup_logging(level: str = "warning") -> None:
    """Configure Python logging with Rich handler.

    Installs a single RichHandler on the root logger. Calling it again only
    adjusts the level of that handler. Handlers installed by others are left
    alone.
    """
    log_level = resolve_level(level)

    root = logging.getLogger()
    root.setLevel(log_level)

    rich_handlers = [h for h in root.handlers if isinstance(h, RichHandler)]
    if rich_handlers:
        for handler in rich_handlers:
            handler.setLevel(log_level)
        return

    handler = RichHandler(
        rich_tracebacks=(log_level == logging.DEBUG),
        show_path=False,
        markup=False,
        show_time=True
    )
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root.addHandler(handler)
