"""Implementations of the reissue CLI commands."""
