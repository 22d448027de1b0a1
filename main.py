"""Entry point for the punch clock.

Running this file behaves exactly like the installed ``punch`` command:
``python main.py in writing``, ``python main.py out`` and so on.  Each run
loads the sheet, applies one command, saves if anything changed and exits.
"""

import sys

from punchclock.cli import main


if __name__ == "__main__":
    sys.exit(main())
