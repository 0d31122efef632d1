"""Configuration: settings and constants."""
