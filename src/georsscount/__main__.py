from __future__ import annotations

import sys

from georsscount.cli import main

sys.exit(main())
