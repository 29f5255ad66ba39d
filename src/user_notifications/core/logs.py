"""Logging setup for command-line use."""

import logging

from rich.logging import RichHandler


def configure_logging(level: str = "WARNING", rich: bool = True):
    """Configure the root logger."""
    handlers = [RichHandler(rich_tracebacks=True, show_path=False)] if rich else None
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s" if rich else "%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="[%X]",
        handlers=handlers,
    )
