"""Allow ``python -m crust``."""

from crust.cli import main

main()
