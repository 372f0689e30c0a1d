"""Infrastructure layer: database access and schema migrations."""
