#!/usr/bin/env python3
"""
WDBC ensemble - one command to run everything.

Usage:
    python run.py                      # default run on the bundled dataset
    python run.py --data-file wdbc.data --seed 7

Accepts every option of ``python -m wdbc_ensemble``.
"""

import os
import sys

sys.path.insert(0, os.path.dirname(__file__))

from wdbc_ensemble.__main__ import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
