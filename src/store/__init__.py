"""Document storage and read layer.

This package persists escalation documents in JSON collections and
exposes the read-side query contract and the SDK client.
"""
