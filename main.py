#!/usr/bin/env python3
"""
Trend-Path - Entry point.

Run this to use the command line without installing the package.
"""
import sys
import multiprocessing
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from trendpath.cli import main

if __name__ == "__main__":
    # Required for ProcessPoolExecutor with the Windows 'spawn' start method.
    multiprocessing.freeze_support()
    sys.exit(main())
