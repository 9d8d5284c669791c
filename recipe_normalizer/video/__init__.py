"""Video recipe package."""
