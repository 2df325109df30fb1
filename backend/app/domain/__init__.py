"""Domain models grouped by bounded context."""
