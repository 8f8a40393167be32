"""ansible-db command-line interface."""
