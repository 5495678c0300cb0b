"""Dependency wiring for the Movement engine."""
