"""Command line interface for azure-blockstore."""
