"""Shared utilities for the Plannora services."""
