"""Core constants shared across the crawler."""
