"""Package entry point.

This module enables running the project with:

    python -m devwizard --config wizard.yaml --scenario <id> ...
"""

from __future__ import annotations

import sys

from devwizard.cli import main

if __name__ == "__main__":
    sys.exit(main())
