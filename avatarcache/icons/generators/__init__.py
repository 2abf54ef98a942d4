"""Deterministic icon generators."""
