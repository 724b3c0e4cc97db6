"""Command-line interface for vboxrepo."""
