"""Clients for fetching avatar images over HTTP."""
