"""Recipe-app archive importers."""
