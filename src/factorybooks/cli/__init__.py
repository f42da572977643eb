"""Command-line interface for factorybooks."""
