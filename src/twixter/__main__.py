"""Allow ``python -m twixter``."""

import sys

from twixter.cli import main

if __name__ == "__main__":
    sys.exit(main())
