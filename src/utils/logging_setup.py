"""
Logging configuration for the CLI and API entry points.
"""

import logging
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: Union[str, int] = logging.INFO, log_file: Optional[Path] = None) -> None:
    """
    Configure root logging with a console handler and an optional file handler.

    Args:
        level: Level name or number for the root logger
        log_file: Also write DEBUG-level records here when given
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)

    # The SDK's transport logs every request at DEBUG
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('groq').setLevel(logging.WARNING)
