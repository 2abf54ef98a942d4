"""Image helpers shared by generators, providers and handlers."""
