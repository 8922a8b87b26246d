"""Configuration, logging, errors and the default database connection."""
