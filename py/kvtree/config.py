"""Runtime configuration and logging setup."""
import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class StoreConfig:
    """Settings for building a MemoryDb.

    Attributes:
        file_path: Backing file for persistence, or None to disable it
        metrics_enabled: Start with metric recording switched on
        log_level: Level name passed to configure_logging()
    """
    file_path: Optional[str] = None
    metrics_enabled: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StoreConfig":
        """Build a config from KVTREE_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            StoreConfig populated from KVTREE_FILE, KVTREE_METRICS and
            KVTREE_LOG_LEVEL
        """
        env = os.environ if environ is None else environ
        return cls(
            file_path=env.get('KVTREE_FILE') or None,
            metrics_enabled=env.get('KVTREE_METRICS', '').strip().lower() in _TRUE_VALUES,
            log_level=env.get('KVTREE_LOG_LEVEL', 'WARNING').strip().upper() or 'WARNING',
        )


def configure_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a stderr handler to the kvtree logger.

    Library code never calls this; it is for entry points. Calling it again
    only changes the level.

    Args:
        level: Level name such as "DEBUG" or "INFO"

    Returns:
        The configured "kvtree" logger
    """
    logger = logging.getLogger('kvtree')
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    if not any(h.get_name() == 'kvtree' for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler.set_name('kvtree')
        logger.addHandler(handler)

    return logger
