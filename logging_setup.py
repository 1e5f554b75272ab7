"""Process-wide logging configuration."""

import logging

from config import Config

LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'


def setup_logging(config: Config) -> None:
    """Configure the root logger from config.log_level."""

    level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)

    # keep werkzeug request lines at the same verbosity as the app
    logging.getLogger('werkzeug').setLevel(level)
