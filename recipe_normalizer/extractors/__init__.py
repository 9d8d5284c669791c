"""Extractors package."""
