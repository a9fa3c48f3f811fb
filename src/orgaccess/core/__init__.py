"""Core infrastructure: database, errors, logging and access control."""
