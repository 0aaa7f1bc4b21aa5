"""State layer.

This package owns the merged per-path state of a remote: how the local,
asset and cache layers combine, which deliveries are worth applying, and
who gets told when the state changes.
"""
