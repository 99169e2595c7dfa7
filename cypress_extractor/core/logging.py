import logging
import sys
from typing import TextIO


def setup_logging(log_level: str = "INFO", stream: TextIO = sys.stdout) -> None:
    """
    Configure centralized application logging.

    The HTTP service logs to stdout; the command-line entry point passes
    stderr so that JSON dumps on stdout stay clean.
    """

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler(stream)],
        force=True,  # ensures handlers are not duplicated during reload
    )


# Project-wide logger namespace
logger = logging.getLogger("cypress_extractor")
