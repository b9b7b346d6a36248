#!/usr/bin/env python3
"""
gitdigest - Main Entry Point

Flattens a remote Git repository into a single digest for
language-model prompts.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from gitdigest.cli import main

if __name__ == "__main__":
    main()
