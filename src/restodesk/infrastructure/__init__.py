"""Infrastructure layer: repository adapters, database, export rendering."""
