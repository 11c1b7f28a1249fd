import logging

from crispr_studio.config import config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def configure_logging(level: str = None) -> None:
    """Configure root logging once for the app factory and the CLI."""
    logging.basicConfig(level=(level or config.log_level).upper(), format=LOG_FORMAT)
