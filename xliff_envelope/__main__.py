"""Package entry point for ``python -m xliff_envelope``.

WHY: Users run the tool as ``python -m xliff_envelope build <pack>``
without the console script on PATH. Python's ``-m`` flag looks for
``__main__.py`` inside the package and executes it.

HOW: Delegates straight to the CLI's main(), which parses sys.argv.

RULES:
- This file must exist for ``python -m xliff_envelope`` to work
- No argument handling here; cli.main() owns it
"""

from xliff_envelope.cli import main

if __name__ == "__main__":
    main()
