"""Simple logging setup - all logs go to stderr so stdout can carry the document."""

import logging
import sys


def setup_logging(verbose: bool = False):
    """Setup logging to stderr. WARNING by default, INFO/DEBUG details when verbose."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr, force=True)
