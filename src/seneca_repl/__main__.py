"""Allow ``python -m seneca_repl``."""

from .cli import main

main()
