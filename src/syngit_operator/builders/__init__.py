"""Builders turning API objects into operator types."""
