"""Helpers for testing avatarcache and apps built on it."""
