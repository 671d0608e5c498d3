"""Package storage layer.

This package defines the storage contract used by maintenance jobs and
a filesystem implementation with a JSON index and content-addressed blobs.
"""
