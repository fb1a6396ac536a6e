"""
Spoonjoy shopping list package.

The package reconciles recipe ingredients and free-text entries into a deduplicated,
ordered shopping list, and exposes the parsers, persistence helpers, and API that do it.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
