#!/usr/bin/env python3
"""
Movable Type to WordPress migration tool
"""

__version__ = "0.1.0"

# Import the main classes and functions for easier access
from mt_migrator.core.config import MigrationConfig, load_config
from mt_migrator.core.context import MigrationContext
from mt_migrator.core.engine import BatchTransferEngine
from mt_migrator.core.migrator import MovableTypeToWordPressMigrator

# Import CLI utilities
from mt_migrator.cli.report import generate_report
