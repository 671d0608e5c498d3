"""Maven snapshot housekeeping.

This package keeps per-version snapshot metadata consistent with stored
files and enforces build retention for snapshot versions.
"""
