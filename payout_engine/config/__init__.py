"""Configuration: settings, constants and database."""
