"""modscout: browse modules, their commands and help text from the terminal."""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
