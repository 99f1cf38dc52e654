#!/usr/bin/env python3
"""
Main entry point for the SharePoint archive migration.
Run this script to move the files listed in the inventory spreadsheet to Azure Blob Storage.

Usage:
    python migrate_archives.py --inventory inventory.xlsx
"""

import sys

from migration.cli import main

if __name__ == "__main__":
    sys.exit(main())
