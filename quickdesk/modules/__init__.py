"""Domain modules grouped by bounded context."""
