"""AI extraction package."""
