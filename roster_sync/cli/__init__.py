"""Command line interface (python -m roster_sync.cli)."""
