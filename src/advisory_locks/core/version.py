"""Version information for advisory locks."""

__version__ = "1.0.0"
