"""Package entry point for ``python -m multi_converter``.

WHY: Users run the converter as ``python -m multi_converter audio song.mp3``
without installing the console script.

HOW: Delegates straight to the CLI's main() function.
"""

from multi_converter.cli import main

if __name__ == "__main__":
    main()
