"""Allow ``python -m src.worker``."""

import sys

from src.worker.main import main

sys.exit(main())
