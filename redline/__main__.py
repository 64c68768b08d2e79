"""
Allow running Redline as a module: ``python -m redline``.

This delegates to the CLI entry point so that both
``redline`` (console script) and ``python -m redline``
behave identically.
"""

from redline.cli import main

if __name__ == "__main__":
    main()
