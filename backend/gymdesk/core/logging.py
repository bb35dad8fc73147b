"""Logging configuration for the application."""
import logging
import sys


def setup_logging(debug: bool = False) -> None:
    """
    Configure application-wide logging once at startup.
    Level is DEBUG when debug is on, otherwise INFO. Output goes to stdout.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # google-cloud clients are chatty at DEBUG
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
