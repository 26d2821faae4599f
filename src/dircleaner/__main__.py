"""Allow ``python -m dircleaner``."""

from dircleaner.cli import main

main()
