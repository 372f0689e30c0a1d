"""Domain entities and their repositories."""
