#!/usr/bin/env python3
"""
Main execution module for the Movable Type to WordPress migration tool
"""

from mt_migrator.cli.commands import main

if __name__ == "__main__":
    main()
