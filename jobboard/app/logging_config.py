import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single root handler unless one already exists (reloads, pytest)."""
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
