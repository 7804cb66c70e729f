# SPDX-License-Identifier: MIT
"""Allow running makemake as: python -m makemake"""

import sys

from makemake.cli import main

sys.exit(main())
