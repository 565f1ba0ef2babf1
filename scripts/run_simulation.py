"""
Main orchestration script for the timeline generator.
Generates the cluster timeline and streams it to the configured sink.
"""

from pathlib import Path
import sys

# Ensure root directory is in path for config import
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

from timeline.cli import main


if __name__ == "__main__":
    sys.exit(main())
