"""Allow running grove as a module: python -m grove"""

import sys

from grove.cli import main

sys.exit(main())
