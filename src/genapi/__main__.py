"""Allow ``python -m genapi``."""

from genapi.app import main

main()
