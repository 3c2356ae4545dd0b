"""Environment resolution services."""
