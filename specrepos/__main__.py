"""Allow ``python -m specrepos``."""

from .main import main

main()
