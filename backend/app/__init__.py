"""Range analysis backend application package."""
