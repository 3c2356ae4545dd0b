"""Runtime helpers shared across the project."""
