"""Partner lead intake service."""
