"""Shared helpers: error types and file naming."""
