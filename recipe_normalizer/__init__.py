"""Recipe normalizer: import recipes from web pages, videos and recipe-app archives."""

__version__ = "0.1.0"
