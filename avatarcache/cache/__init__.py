"""Content-addressed file storage for generated and fetched avatars."""
