#!/usr/bin/env python3
"""
colabnet - Main Entry Point

Builds a collaboration snapshot from git history and answers
owners and cousins queries against it.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from colabnet.cli import main

if __name__ == "__main__":
    main()
