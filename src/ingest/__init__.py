"""Register extract ingestion.

This module reads CSV extracts line by line and maps rows to registrations.
It streams accepted records into the store in committed batches.
"""
