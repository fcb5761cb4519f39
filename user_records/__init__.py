"""User records API."""
