#!/usr/bin/env python3
# fshell/__main__.py
from __future__ import annotations

import sys

from fshell.demo import main

if __name__ == "__main__":
    sys.exit(main())
