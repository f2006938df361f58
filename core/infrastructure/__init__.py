"""Infrastructure layer - logging and clock."""
