"""External providers."""
