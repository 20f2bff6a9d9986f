"""Subcommands of the bwtool CLI."""
