"""Command line interface for bumpwright."""
