#!/usr/bin/env python3
"""
Launcher script for selfupgrade.
Run this script to upgrade an installed executable.
"""

import sys
import os

# Add the current directory to Python path so we can import selfupgrade
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from selfupgrade.main import main

if __name__ == "__main__":
    sys.exit(main())
