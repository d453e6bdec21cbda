"""Role resolution and contextual grant management."""
