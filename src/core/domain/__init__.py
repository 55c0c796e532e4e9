"""Domain models and errors.

The domain knows nothing about HTTP, files or the CLI: only service nodes,
snapshots and the ways a refresh can fail.
"""
