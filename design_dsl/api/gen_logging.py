"""
Logging configuration for the DDSL generation pipeline.

Usage in resolver and generator modules:
    from design_dsl.api.gen_logging import get_logger
    logger = get_logger(__name__)

The root logger name is "ddsl.gen". Log levels are controlled by the CLI
flags or by the `log_level` setting.
"""

import logging
import sys

_LOGGER_NAME = "ddsl.gen"

_LEVEL_TAGS = {
    logging.WARNING: "[WARN]",
    logging.ERROR: "[FAIL]",
    logging.CRITICAL: "[FAIL]",
}


def get_logger(name: str = None) -> logging.Logger:
    """
    Return a child logger under the ddsl.gen hierarchy.

    Args:
        name: Module __name__, a generator name, or None for the root logger.

    Returns:
        logging.Logger instance
    """
    if name is None or name == _LOGGER_NAME:
        return logging.getLogger(_LOGGER_NAME)
    # "design_dsl.api.resolvers.relationships" -> "ddsl.gen.relationships"
    short = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"{_LOGGER_NAME}.{short}")


def resolve_level(verbose: bool = False, quiet: bool = False, level_name: str = None) -> int:
    """Map CLI flags (which win) or a level name to a logging level."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    if level_name:
        level = logging.getLevelName(level_name.upper())
        if isinstance(level, int):
            return level
    return logging.INFO


def configure_gen_logging(verbose: bool = False, quiet: bool = False, level_name: str = None) -> None:
    """
    Configure the ddsl.gen logger hierarchy.

    Levels:
        --verbose / -v  -> DEBUG   (resolver and synthesis detail)
        (default)       -> INFO    (per-generator summary lines)
        --quiet / -q    -> WARNING (warnings and failed units only)
    """
    level = resolve_level(verbose, quiet, level_name)

    root_logger = logging.getLogger(_LOGGER_NAME)
    root_logger.setLevel(level)

    # Re-configuration only adjusts levels
    if root_logger.handlers:
        for handler in root_logger.handlers:
            handler.setLevel(level)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(_GenFormatter())
    root_logger.addHandler(handler)

    root_logger.propagate = False


class _GenFormatter(logging.Formatter):
    """Emit the message as-is, tagging warnings and errors that carry no tag yet."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        tag = _LEVEL_TAGS.get(record.levelno)
        if tag and not message.lstrip().startswith("["):
            return f"{tag} {message}"
        return message
