#!/usr/bin/env python3
"""
Cross-wiki Contribution Survey

Surveys the pages a user (and optionally a category of users) created on
every Wikimedia wiki they edit, and writes the results to spam.txt.

Usage:
    python scripts/xwiki_survey.py <username> [<category>]
    python scripts/xwiki_survey.py --help
"""

import sys
from pathlib import Path

# Add project root to path for the shared package
SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT))

from xwiki_survey.cli import main


if __name__ == "__main__":
    main()
