"""CLI command modules for openframe."""
