"""Allow `python -m modscout`."""

from .cli import main

main()
