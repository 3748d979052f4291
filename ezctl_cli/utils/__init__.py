"""Small helpers shared by the store and the CLI."""
