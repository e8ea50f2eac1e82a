"""
Bank transaction sequence synchronisation

Keeps a table of posted bank transactions in step with the latest statement
scraped from the bank, one calendar day at a time, without re-inserting rows
that did not change.

Components:
- sequence: Validation, alignment and position reconciliation of one day
- emit: Applying operation lists atomically (in memory or PostgreSQL)
- store: Loading one day of stored rows
- sync: Per-day driver over a PostgreSQL table
- config, loaders, report: Settings, JSON inputs and output formatting
- cli: Command-line interface

Usage:
    from banktx_sync.sequence import reconcile_day
    from banktx_sync.sync import update_banktx_db
"""

__version__ = "1.0.0"
__all__ = ["sequence", "emit", "config", "loaders", "store", "sync", "report", "cli"]
