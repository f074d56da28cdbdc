"""Allow ``python -m motion_tracking``."""

import sys

from .main import main

sys.exit(main())
