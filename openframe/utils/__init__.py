"""Utility modules for openframe."""
