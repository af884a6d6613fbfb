import logging
import os
import sys

# No session log file: output goes to stderr only


def setup_logger(level: int = logging.INFO, name: str = "kirinuki") -> logging.Logger:
    """Create or update the project logger.

    - Respects env overrides KIRINUKI_LOG_LEVEL/KIRINUKI_LOG_CATS on every call
      (so late CLI parsing can still take effect).
    - Ensures there is exactly one StreamHandler on the base logger and updates
      its formatter/filters instead of bailing out early.
    """
    logger = logging.getLogger(name)

    env_level = (os.getenv("KIRINUKI_LOG_LEVEL") or "").strip().lower()
    if env_level:
        level_map = {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR,
            "critical": logging.CRITICAL,
        }
        level = level_map.get(env_level, level)
    logger.setLevel(level)

    stream_handler: logging.StreamHandler | None = None
    for h in list(logger.handlers):
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr:
            stream_handler = h

    if stream_handler is None:
        stream_handler = logging.StreamHandler(stream=sys.stderr)
        logger.addHandler(stream_handler)

    # Keep output concise: no logger name in the message
    fmt = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    stream_handler.setFormatter(fmt)

    stream_handler.filters.clear()
    cats = (os.getenv("KIRINUKI_LOG_CATS") or "").strip()
    if cats:
        stream_handler.addFilter(CategoryFilter({c.strip() for c in cats.split(",") if c.strip()}))

    logger.propagate = False
    return logger


class CategoryFilter(logging.Filter):
    """Pass only records whose last dotted name component is in `allowed`."""

    def __init__(self, allowed: set[str]) -> None:
        super().__init__()
        self.allowed = set(allowed)

    def filter(self, record: logging.LogRecord) -> bool:
        # record.name like: kirinuki.batch, kirinuki.page_registry
        parts = (record.name or "").split(".")
        suffix = parts[-1] if parts else record.name
        return suffix in self.allowed


def get_logger(name: str | None = None) -> logging.Logger:
    base = setup_logger()
    return base if not name else base.getChild(name)
