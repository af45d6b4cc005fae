import logging
from typing import Optional

from .config import SaveSettings

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def configure_logging(settings: Optional[SaveSettings] = None, *, debug: bool = False) -> int:
    """Configure the root logger from ``settings.log_level``.

    ``debug`` forces DEBUG regardless of the configured level. Returns the
    level that was applied.
    """
    if settings is None:
        settings = SaveSettings()
    level = logging.DEBUG if debug else logging.getLevelName(settings.log_level)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    return level
