"""Allow ``python -m bookpress``."""

from .cli import main

main()
