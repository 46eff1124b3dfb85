#!/usr/bin/env python3
"""
vscroll demo launcher script.

Run this from the project root to open the virtual scroll demo window.
"""

import sys
from pathlib import Path

# Make the vscroll package importable without installing it
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

if __name__ == '__main__':
    from vscroll.run_gui import install_crash_handlers, run_gui, suppress_warnings
    suppress_warnings()
    install_crash_handlers()
    item_count = int(sys.argv[1]) if len(sys.argv) > 1 else None
    sys.exit(run_gui(item_count))
