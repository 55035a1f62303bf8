"""Package entry point for ``python -m reading_aid``.

WHY: Users run the tools as ``python -m reading_aid simplify "..."`` or
start the HTTP API with ``python -m reading_aid serve``.

HOW: Delegates straight to the CLI's main() function, which owns all
subcommand dispatch (including ``serve``).
"""

from reading_aid.cli import main

if __name__ == "__main__":
    main()
