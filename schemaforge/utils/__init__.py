"""Shared utilities for SchemaForge."""
