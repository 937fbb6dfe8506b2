"""Storage and versioning layer.

This module persists registrations and the data version ledger in SQLite.
It powers search, key lookup, and statistics for the SDK.
"""
